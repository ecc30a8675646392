#!/usr/bin/env python3
"""
Benchmark Script for DataPulse Analytics API

Measures latency of the aggregate query and insight endpoints

Usage:
    DATAPULSE_TOKEN=<token> python scripts/benchmark_analytics.py [base-url]
"""

import os
import sys
import time
import requests
import statistics


def benchmark_queries(base_url: str, token: str):
    """Benchmark analytics queries"""
    print(f"\n{'=' * 60}")
    print("BENCHMARK: Query Performance")
    print(f"{'=' * 60}")

    queries = [
        ("Group by name", f"{base_url}/analytics/query"),
        ("Group by day", f"{base_url}/analytics/query?group_by=day"),
        ("Group by hour", f"{base_url}/analytics/query?group_by=hour"),
        ("Single event by day", f"{base_url}/analytics/query?group_by=day&event_name=purchase"),
        ("Insights", f"{base_url}/analytics/insights"),
    ]
    headers = {"Authorization": f"Bearer {token}"}

    results = []

    for name, url in queries:
        times = []

        # Run each query 5 times
        for _ in range(5):
            start = time.time()
            try:
                response = requests.get(url, headers=headers, timeout=30)
                elapsed = (time.time() - start) * 1000  # Convert to ms

                if response.status_code == 200:
                    times.append(elapsed)
                else:
                    print(f"Error in {name}: Status {response.status_code}")
            except requests.RequestException as e:
                print(f"Error in {name}: {e}")

        if times:
            ordered = sorted(times)
            results.append({
                "name": name,
                "p50": statistics.median(times),
                "p95": ordered[int(len(times) * 0.95)] if len(times) > 1 else times[0],
                "avg": statistics.mean(times),
            })

    print(f"\n{'Query':<25} {'P50':>10} {'P95':>10} {'Avg':>10}")
    print(f"{'-' * 60}")
    for r in results:
        print(f"{r['name']:<25} {r['p50']:>9.0f}ms {r['p95']:>9.0f}ms {r['avg']:>9.0f}ms")

    print(f"{'=' * 60}\n")

    return results


def main():
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
    token = os.environ.get("DATAPULSE_TOKEN")
    if not token:
        print("Error: DATAPULSE_TOKEN must be set")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("DATAPULSE ANALYTICS API - QUERY BENCHMARK")
    print("=" * 60)
    print(f"Target: {base_url}")
    print("=" * 60)

    benchmark_queries(base_url, token)


if __name__ == "__main__":
    main()
