"""Replay the first minutes of a race and print what a viewer would see."""

import asyncio
import logging

from f1replay.data import HttpCache, MemoryCache, TieredRepository
from f1replay.data.errors import CacheError
from f1replay.formatters import format_lap_time
from f1replay.services import ReplaySession, visible_sector_times


async def pick_cache():
    """Use the cache server when it is up, an in-process cache otherwise."""
    cache = HttpCache()
    try:
        await cache.get("ping")
    except CacheError:
        await cache.close()
        return MemoryCache()
    return cache


async def replay(year: int, circuit: str, drivers: list[int]) -> None:
    repo = TieredRepository(cache=await pick_cache())
    try:
        sessions = await repo.get_sessions(year)
        race = next(
            (
                s for s in sessions
                if s.session_type == "Race" and circuit.lower() in (s.circuit_short_name or "").lower()
            ),
            None,
        )
        if race is None:
            print(f"No race at '{circuit}' in {year}")
            return
        print(f"{race.circuit_short_name} {race.year}: {race.session_name} ({race.status.value})")

        async with ReplaySession(repo, race, tracked=drivers) as session:
            await session.load()
            print(f"Start: {session.session_start}  race end: {session.timeline.race_end or 0:.0f}s\n")

            laps = {(lap.lap_number, lap.driver_number): lap for lap in session.series.all_laps()}
            for minute in (5, 10, 15):
                session.seek(minute * 60)
                snap = session.snapshot()
                print(f"=== {snap.local_time:%H:%M:%S} (race time {snap.race_time:.0f}s) ===")
                for entry in snap.grid[:5]:
                    radio = f"  [{entry.radio_count} radio]" if entry.radio_count else ""
                    print(f"  P{entry.position}: {entry.driver.name_acronym}{radio}")
                if snap.gap:
                    print(f"  Gap #{snap.gap.ahead} -> #{snap.gap.behind}: {snap.gap.label}")
                for number, telemetry in snap.telemetry.items():
                    if telemetry.car:
                        print(f"  #{number}: {telemetry.car.speed} km/h, gear {telemetry.car.n_gear}")
                for lap_number in sorted(snap.visible_laps)[-1:]:
                    for number, visibility in snap.visible_laps[lap_number].items():
                        lap = laps.get((lap_number, number))
                        if lap is None:
                            continue
                        sectors = " | ".join(
                            format_lap_time(s) for s in visible_sector_times(lap, visibility)
                        )
                        print(f"  Lap {lap_number} #{number}: {sectors}")
                print()
    finally:
        await repo.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(replay(2023, "Sakhir", [1, 11]))
