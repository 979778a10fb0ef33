#!/usr/bin/env python3
"""
Smoke test: run the detector against the mock camera and read its state over WebSocket
"""

import asyncio
import json
import subprocess
import sys

import websockets

PORT = 8766


async def check_state_stream():
    """Connect to a running detector and wait for a picking_state message"""
    uri = f"ws://localhost:{PORT}"
    async with websockets.connect(uri) as websocket:
        print("✅ Connected to WebSocket")

        await websocket.send(json.dumps({"type": "ping"}))
        for _attempt in range(20):
            data = json.loads(await asyncio.wait_for(websocket.recv(), timeout=5.0))
            if data["type"] == "pong":
                print("✅ Received pong response")
            elif data["type"] == "picking_state":
                required_fields = ["is_picking", "alert_fired", "face_detected", "hands_detected"]
                missing = [field for field in required_fields if field not in data["data"]]
                if missing:
                    raise AssertionError(f"picking_state is missing {missing}")
                print(f"✅ Received picking state: {data['data']}")
                return
        raise AssertionError("No picking_state message received")


def main():
    print("🎭 Starting detector with mock camera...")
    process = subprocess.Popen(
        [sys.executable, "-m", "face_picking", "--mock-camera", "--serve", "--port", str(PORT)],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )

    try:
        asyncio.run(asyncio.sleep(5))
        asyncio.run(check_state_stream())
        print("🎉 Mock camera smoke test passed")
        return 0
    except Exception as e:
        print(f"❌ Smoke test failed: {e}")
        return 1
    finally:
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()


if __name__ == "__main__":
    sys.exit(main())
