#!/usr/bin/env python3
"""
Benchmark Script for DataPulse Analytics API

Ingests 100k events through POST /analytics/events in batches of 1000

Usage:
    python scripts/benchmark_ingestion.py [base-url]

Set DATAPULSE_TOKEN to reuse an existing account; otherwise a throwaway
account is registered.
"""

import os
import sys
import time
import requests
from uuid import uuid4
from datetime import datetime, timedelta, timezone
import statistics


def get_token(base_url: str) -> str:
    token = os.environ.get("DATAPULSE_TOKEN")
    if token:
        return token

    response = requests.post(
        f"{base_url}/auth/register",
        json={
            "email": f"bench-{uuid4().hex[:8]}@datapulse.io",
            "name": "Benchmark",
            "password": "benchmark-password",
        },
        timeout=10
    )
    response.raise_for_status()
    return response.json()["token"]


def generate_events(count: int, start_date: datetime):
    """Generate test events"""
    event_names = ["page_view", "button_click", "form_submit", "purchase", "signup"]

    return [
        {
            "name": event_names[i % len(event_names)],
            "timestamp": (start_date + timedelta(seconds=i)).isoformat(),
            "user_id": f"user_{i % 10000}",  # 10k unique users
            "session_id": f"session_{i % 2500}",
            "properties": {"test": True, "index": i}
        }
        for i in range(count)
    ]


def benchmark_ingestion(base_url: str, token: str, total_events: int = 100000, batch_size: int = 1000):
    """Benchmark event ingestion"""
    print(f"\n{'=' * 60}")
    print(f"BENCHMARK: Ingesting {total_events:,} events")
    print(f"{'=' * 60}")

    start_date = datetime.now(timezone.utc) - timedelta(days=7)
    headers = {"Authorization": f"Bearer {token}"}

    total_ingested = 0
    failed_batches = 0
    batch_times = []

    start_time = time.time()

    for i in range(0, total_events, batch_size):
        batch_start = time.time()

        events = generate_events(
            min(batch_size, total_events - i),
            start_date + timedelta(seconds=i * 5)
        )

        try:
            response = requests.post(
                f"{base_url}/analytics/events",
                json={"events": events},
                headers=headers,
                timeout=30
            )

            if response.status_code == 201:
                total_ingested += response.json()["ingested"]
            else:
                failed_batches += 1
                print(f"Error in batch {i // batch_size}: Status {response.status_code}")

        except requests.RequestException as e:
            failed_batches += 1
            print(f"Error in batch {i // batch_size}: {e}")

        batch_time = time.time() - batch_start
        batch_times.append(batch_time)

        if (i // batch_size) % 10 == 0:
            print(f"Progress: {i + len(events):,} / {total_events:,} events | "
                  f"Batch time: {batch_time:.2f}s")

    total_time = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("INGESTION RESULTS")
    print(f"{'=' * 60}")
    print(f"Total events:        {total_events:,}")
    print(f"Ingested:            {total_ingested:,}")
    print(f"Failed batches:      {failed_batches:,}")
    print(f"Total time:          {total_time:.2f}s")
    print(f"Events/sec:          {total_ingested / total_time:,.0f}")
    print(f"Avg batch time:      {statistics.mean(batch_times):.2f}s")
    print(f"Min batch time:      {min(batch_times):.2f}s")
    print(f"Max batch time:      {max(batch_times):.2f}s")
    print(f"{'=' * 60}\n")

    return total_time


def main():
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

    print("\n" + "=" * 60)
    print("DATAPULSE ANALYTICS API - INGESTION BENCHMARK")
    print("=" * 60)
    print(f"Target: {base_url}")
    print("=" * 60)

    try:
        response = requests.get(f"{base_url}/health", timeout=5)
        if response.status_code != 200:
            print("Error: API is not healthy")
            sys.exit(1)
    except requests.RequestException as e:
        print(f"Error: Cannot connect to API: {e}")
        sys.exit(1)

    token = get_token(base_url)
    benchmark_ingestion(base_url, token, total_events=100000, batch_size=1000)

    print("\n" + "=" * 60)
    print("BENCHMARK COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
