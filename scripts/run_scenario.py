"""CLI for running offline elevator bank scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from simulation import BankConfig, ElevatorBankError, Simulation

log = logging.getLogger("scenario")


def build_simulation(config: Dict) -> Simulation:
    bank = BankConfig.from_dict(config.get("bank", {}))
    return Simulation(bank)


def _apply_scheduled_events(
    simulation: Simulation, events: Iterable[Dict], current_time: int
) -> None:
    for event in events:
        if event.get("time", 0) != current_time:
            continue
        kind = event.get("type")
        try:
            if kind == "pickup":
                simulation.request_pickup(event["floor"], event["direction"])
            elif kind == "destination":
                simulation.select_destination(event["car_id"], event["floor"])
            else:
                log.warning("Skipping event with unknown type %r at t=%s", kind, current_time)
        except (ElevatorBankError, ValueError) as exc:
            log.warning("Event %s at t=%s rejected: %s", event, current_time, exc)


def run_simulation(simulation: Simulation, config: Dict) -> List[Dict]:
    duration = config.get("duration", 100)
    events = config.get("events", [])
    snapshots: List[Dict] = []

    for _ in range(duration):
        _apply_scheduled_events(simulation, events, simulation.current_time)
        simulation.step()
        snapshots.append(simulation.state())
    return snapshots


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write per-step snapshots as JSON",
    )
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = json.loads(args.config.read_text())
    simulation = build_simulation(config)
    snapshots = run_simulation(simulation, config)

    results = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "duration": simulation.current_time,
        "scheduler": simulation.scheduler_name,
        "final_state": simulation.state(),
        "states_over_time": snapshots,
    }

    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Scheduler: {results['scheduler']}")
    print(f"Duration: {results['duration']} steps")
    print("Final cars:")
    for snapshot in simulation.snapshots():
        print(f"  {snapshot}")
    pending = simulation.pending_pickups()
    if pending:
        print("Pending pickups: " + ", ".join(str(p) for p in pending))
    if args.output:
        print(f"Saved snapshots to {args.output}")


if __name__ == "__main__":
    main()
