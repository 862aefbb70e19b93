#!/usr/bin/env python3
"""CampusGuessr bot player simulator.

Plays full matches against a running server with random guesses, to
exercise the session API and fill the stats endpoint.

Usage:
    # 5 bots, 3 matches each
    python -m tools.simulator.simulate --server http://localhost:8000 --players 5 --matches 3

    # Bots that tend to guess near the middle of the map
    python -m tools.simulator.simulate --players 20 --spread 15
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
import time
from dataclasses import dataclass, field

import httpx


@dataclass
class SimPlayer:
    name: str
    matches_played: int = 0
    rounds_played: int = 0
    scores: list[int] = field(default_factory=list)
    load_failures: int = 0
    errors: int = 0


def pick_guess(spread: float | None, floors: list[int]) -> tuple[dict, int]:
    """Random map position and floor. With a spread, positions cluster around the map center."""
    if spread is None:
        x, y = random.uniform(0, 100), random.uniform(0, 100)
    else:
        x = min(100.0, max(0.0, random.gauss(50, spread)))
        y = min(100.0, max(0.0, random.gauss(50, spread)))
    return {"x": round(x, 2), "y": round(y, 2)}, random.choice(floors)


async def _call(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> dict:
    resp = await client.request(method, url, **kwargs)
    resp.raise_for_status()
    return resp.json()


async def play_match(
    client: httpx.AsyncClient,
    player: SimPlayer,
    base: str,
    floors: list[int],
    spread: float | None,
    think_seconds: float,
) -> None:
    """Play one match from the title screen to the final results."""
    state = await _call(client, "POST", f"{base}/sessions")
    sid = state["session_id"]

    try:
        state = await _call(client, "POST", f"{base}/sessions/{sid}/start")
        while state["error"] == "load_failure":
            player.load_failures += 1
            await asyncio.sleep(0.5)
            state = await _call(client, "POST", f"{base}/sessions/{sid}/start")

        while state["screen"] != "final_results":
            if state["screen"] == "game":
                location, floor = pick_guess(spread, floors)
                await asyncio.sleep(think_seconds)
                await _call(client, "PUT", f"{base}/sessions/{sid}/guess/location", json=location)
                await _call(client, "PUT", f"{base}/sessions/{sid}/guess/floor", json={"floor": floor})
                state = await _call(client, "POST", f"{base}/sessions/{sid}/submit")
                player.rounds_played += 1
            elif state["screen"] == "result":
                state = await _call(client, "POST", f"{base}/sessions/{sid}/advance")
                if state["error"] == "load_failure":
                    player.load_failures += 1
                    await asyncio.sleep(0.5)
            else:
                raise RuntimeError(f"unexpected screen {state['screen']!r}")

        player.scores.append(state["total_score"])
        player.matches_played += 1
    finally:
        await client.delete(f"{base}/sessions/{sid}")


async def run_player(
    client: httpx.AsyncClient,
    player: SimPlayer,
    base: str,
    floors: list[int],
    args: argparse.Namespace,
) -> None:
    for _ in range(args.matches):
        try:
            await play_match(client, player, base, floors, args.spread, args.think)
        except (httpx.HTTPError, RuntimeError) as e:
            player.errors += 1
            print(f"  [{player.name}] match aborted: {e}", file=sys.stderr)


async def run_simulation(args: argparse.Namespace) -> None:
    """Run the full simulation."""
    base = f"{args.server.rstrip('/')}/api/v1"
    players = [SimPlayer(name=f"bot-{i + 1}") for i in range(args.players)]

    print(f"Starting simulation: {args.players} players, {args.matches} matches each")
    print(f"  Server: {args.server}")
    print(f"  Spread: {'uniform' if args.spread is None else args.spread}")
    print()

    start = time.monotonic()

    async with httpx.AsyncClient(timeout=10.0) as client:
        config = await _call(client, "GET", f"{base}/config")
        floors = config["floors"]

        tasks = [run_player(client, p, base, floors, args) for p in players]
        await asyncio.gather(*tasks)

        elapsed = time.monotonic() - start
        scores = [s for p in players for s in p.scores]
        max_match = config["total_rounds"] * config["max_score_per_round"]

        print(f"\nSimulation complete in {elapsed:.1f}s")
        print(f"  Matches played: {len(scores)}")
        print(f"  Rounds played: {sum(p.rounds_played for p in players)}")
        print(f"  Load failures: {sum(p.load_failures for p in players)}")
        print(f"  Errors: {sum(p.errors for p in players)}")
        if scores:
            print(f"  Average match score: {sum(scores) / len(scores):.0f} / {max_match}")
            print(f"  Best match score: {max(scores)}")

        # Check server stats
        try:
            stats = await _call(client, "GET", f"{base}/stats")
        except httpx.HTTPError:
            return
        print(f"\nServer stats:")
        print(f"  Matches started: {stats['matches_started']}")
        print(f"  Matches completed: {stats['matches_completed']}")
        print(f"  Rounds scored: {stats['rounds_scored']}")
        print(f"  Average round score: {stats['average_round_score']}")
        print(f"  Active sessions: {stats['active_sessions']['total']}")


def main():
    parser = argparse.ArgumentParser(description="CampusGuessr bot player simulator")
    parser.add_argument("--server", default="http://localhost:8000", help="Server URL")
    parser.add_argument("--players", type=int, default=5, help="Number of simulated players")
    parser.add_argument("--matches", type=int, default=1, help="Matches per player")
    parser.add_argument("--spread", type=float, default=None,
                        help="Std-dev of guesses around the map center (default: uniform)")
    parser.add_argument("--think", type=float, default=0.0,
                        help="Seconds each bot waits before guessing")

    args = parser.parse_args()
    asyncio.run(run_simulation(args))


if __name__ == "__main__":
    main()
