#!/usr/bin/env python3
import os
import time

import httpx

from areuok.client import ApiError, AreuokClient

API_BASE = os.getenv("API_BASE", "http://api:8080").rstrip("/")
TARGET_NAME = os.getenv("SEED_TARGET_NAME", "demo-alice")
SUPERVISOR_NAME = os.getenv("SEED_SUPERVISOR_NAME", "demo-bob")


def wait_api(api: AreuokClient, max_attempts: int = 60):
    for _ in range(max_attempts):
        try:
            api.http.get("/api/v1/health").raise_for_status()
            return
        except httpx.HTTPError:
            time.sleep(2)
    raise RuntimeError("API did not become ready in time")


def ensure_supervision(api: AreuokClient, supervisor_id: str, target_id: str):
    if any(item["target_id"] == target_id for item in api.list_relations(supervisor_id)):
        return
    try:
        api.request_supervision(supervisor_id, target_id)
    except ApiError as exc:
        if exc.code != "duplicate_request":
            raise
    api.accept(supervisor_id, target_id)


def main():
    with AreuokClient(API_BASE) as api:
        wait_api(api)
        # hardware ids make the seed idempotent: reruns recover the same devices
        target = api.register(TARGET_NAME, hardware_id=f"seed-{TARGET_NAME}", mode="signin")
        supervisor = api.register(SUPERVISOR_NAME, hardware_id=f"seed-{SUPERVISOR_NAME}", mode="supervisor")

        ensure_supervision(api, supervisor["device_id"], target["device_id"])
        streak = api.sign_in(target["device_id"])

        print(f"Seed complete: {SUPERVISOR_NAME} supervises {TARGET_NAME} (streak {streak['streak']})")


if __name__ == "__main__":
    main()
