"""
Restart check against a real database.

Records a full trip, restarts the server and confirms the trip, its
completion and its stored route survived.
"""

import time
import subprocess
import httpx
import sys
import os
import signal
import uuid
from datetime import datetime, timedelta, timezone

BASE_URL = "http://127.0.0.1:8000"
SERVER_CMD = [sys.executable, "-m", "uvicorn", "roady.app.main:app", "--host", "127.0.0.1", "--port", "8000"]


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def record_trip(username, password):
    """Sign up, drive a short trip and stop it. Returns (user_id, trip_id, stop payload)."""
    resp = httpx.post(f"{BASE_URL}/auth/signup", json={
        "email": f"{username}@test.com",
        "username": username,
        "password": password
    })
    if resp.status_code != 201:
        raise Exception(f"Signup failed: {resp.status_code} {resp.text}")
    body = resp.json()
    user_id = body["user"]["id"]
    headers = {"Authorization": f"Bearer {body['token']}"}
    print(f"✅ User {username} created")

    resp = httpx.post(f"{BASE_URL}/tracking/start", json={
        "userId": user_id,
        "metadata": {"name": "Persistence run"},
        "vehicle": {"make": "Volvo", "model": "240", "year": 1988}
    }, headers=headers)
    resp.raise_for_status()
    trip_id = resp.json()["tripId"]
    print(f"✅ Trip {trip_id} started")

    now = datetime.now(timezone.utc)
    points = [
        {"latitude": 59.33 + i * 0.001, "longitude": 18.06, "timestamp": (now + timedelta(seconds=i)).isoformat()}
        for i in range(5)
    ]
    resp = httpx.post(f"{BASE_URL}/tracking/points", json={
        "userId": user_id, "tripId": trip_id, "batchId": "persist-1", "points": points
    }, headers=headers)
    resp.raise_for_status()
    print("✅ 5 points uploaded")

    resp = httpx.post(f"{BASE_URL}/tracking/stop", json={"userId": user_id, "tripId": trip_id}, headers=headers)
    resp.raise_for_status()
    stopped = resp.json()["trip"]
    print(f"✅ Trip stopped after {stopped['duration']:.2f}s with {len(stopped['route'])} points")
    return user_id, trip_id, stopped


def run_verification():
    username = f"persist_{uuid.uuid4().hex[:8]}"
    password = "securePassword123"

    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": "True"}
    )

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        print("\n--- [Step 2] Recording Trip ---")
        user_id, trip_id, stopped = record_trip(username, password)
    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2)  # port release

    print("\n--- [Step 4] Restarting Server ---")
    proc2 = subprocess.Popen(SERVER_CMD, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        print("\n--- [Step 5] Logging In (Post-Restart) ---")
        resp = httpx.post(f"{BASE_URL}/auth/login", json={"emailOrUsername": username, "password": password})
        if resp.status_code != 200:
            raise Exception(f"Login failed after restart: {resp.status_code} {resp.text}")
        headers = {"Authorization": f"Bearer {resp.json()['token']}"}
        print("✅ Login Successful (User Persisted!)")

        print("\n--- [Step 6] Listing Trips ---")
        resp = httpx.get(f"{BASE_URL}/trips", params={"userId": user_id}, headers=headers)
        resp.raise_for_status()
        trips = {t["id"]: t for t in resp.json()}
        if trip_id not in trips:
            raise Exception("Trip missing after restart")
        listed = trips[trip_id]
        if listed["status"] != "completed" or listed["endTime"] != stopped["endTime"]:
            raise Exception(f"Trip changed across restart: {listed}")
        print("✅ Trip persisted as completed")

        print("\n--- [Step 7] Confirming Stop Is Final ---")
        resp = httpx.post(f"{BASE_URL}/tracking/stop", json={"userId": user_id, "tripId": trip_id}, headers=headers)
        if resp.status_code != 409:
            raise Exception(f"Second stop was not rejected: {resp.status_code} {resp.text}")
        print("✅ Second stop rejected")
    finally:
        print("\n--- [Step 8] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
