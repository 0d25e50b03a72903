#!/usr/bin/env python3
"""Example: Signed MCP request and response

Demonstrates the full round trip: an agent wallet signs an MCP request
envelope carrying its capability, the tool server verifies the frame and
its request binding, then answers with a signed response.

Usage:
    python examples/02_signed_mcp_request.py

Requirements:
    pip install talos-core
"""
from __future__ import annotations

import uuid

import talos_core
from talos_core import (
    Capability,
    CapabilityStore,
    FrameSchemaError,
    Wallet,
    build_signed_message,
    build_signed_response,
    did_to_public_key,
    generate_keypair,
    public_key_to_did,
    sign_capability,
    verify_capability,
    verify_frame,
    verify_request_binding,
    verify_response_binding,
)


def main() -> None:
    print(f"talos-core version: {talos_core.__version__}")

    # Step 1: An administrator grants the agent access to the files tool
    admin = generate_keypair()
    agent = Wallet.generate(name="research-agent")
    server = Wallet.generate(name="files-server")
    grant = sign_capability(
        Capability.create(
            iss=public_key_to_did(admin.public_key),
            sub=agent.to_did(),
            scope="files/*",
        ),
        admin.private_key,
    )
    store = CapabilityStore([grant])
    print(f"Agent: {agent!r}")

    # Step 2: The agent signs a tools/call request
    request = {
        "jsonrpc": "2.0",
        "id": "req-1",
        "method": "tools/call",
        "params": {"name": "read_file", "arguments": {"path": "/data/notes.txt"}},
    }
    session_id = str(uuid.uuid4())
    frame = build_signed_message(
        agent,
        request,
        session_id=session_id,
        correlation_id="corr-1",
        tool="files",
        method="read",
        capabilities=store,
    )
    print(f"Signed MCP_MESSAGE sig={frame['sig'][:16]}...")

    # Step 3: The server checks the frame, the body binding, and the grant
    sender_key = did_to_public_key(frame["peer_id"])
    print(f"Frame valid:       {verify_frame(frame, sender_key)}")
    print(f"Request bound:     {verify_request_binding(frame, request)}")
    print(f"Capability valid:  {verify_capability(frame['capability'], admin.public_key)}")

    # Step 4: The server answers
    response = {
        "jsonrpc": "2.0",
        "id": "req-1",
        "result": {"content": [{"type": "text", "text": "ok"}]},
    }
    reply = build_signed_response(
        server,
        response,
        session_id=session_id,
        correlation_id="corr-1",
        tool="files",
        method="read",
        mcp_id="req-1",
    )
    print(f"Response valid:    {verify_frame(reply, server.public_key)}")
    print(f"Response bound:    {verify_response_binding(reply, response)}")

    # Step 5: An intermediary injects a field
    try:
        verify_frame({**frame, "priority": "high"}, sender_key)
    except FrameSchemaError as exc:
        print(f"Rejected: {exc.code}: {exc.message}")

    print("\nRound trip complete.")


if __name__ == "__main__":
    main()
