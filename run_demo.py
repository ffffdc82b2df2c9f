"""
Scripted end-to-end run of the monitor.

This script exercises:
1. Configuration loading and logging setup
2. Simulated streaming on a scripted clock (50 ms ticks, no real waiting)
3. Forced tachycardia / bradycardia episodes with the one-shot BLE warning
4. A live asyncio driver session
5. Report text and CSV export

Run with: uv run python run_demo.py [export.csv]
"""

import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from adapters.console.notifier import RichConsoleNotifier, log_table, state_panel
from cardiowatch.config import get_config
from cardiowatch.errors import ConfigError
from cardiowatch.observability import configure_logging
from cardiowatch.services.clock import ManualClock
from cardiowatch.services.monitor import Monitor

console = Console()


def run_scripted_episode(monitor: Monitor, clock: ManualClock, seconds: float) -> None:
    """Tick the monitor for `seconds` of scripted time."""
    interval_ms = monitor.config.monitor.tick_interval_ms
    for _ in range(int(seconds * 1000 / interval_ms)):
        clock.advance(milliseconds=interval_ms)
        monitor.tick()


async def run_live_session(monitor: Monitor, seconds: float) -> None:
    """Let the asyncio driver tick on the wall clock for a short while."""
    monitor.start()
    try:
        await asyncio.sleep(seconds)
    finally:
        monitor.stop()
        await monitor.driver.wait_stopped()


async def main(export_path: Path) -> None:
    config = get_config()
    configure_logging(config.logging)

    console.print(Panel("🫀 RR-interval monitor demo", style="bold blue"))

    clock = ManualClock()
    monitor = Monitor(config=config, clock=clock, notifier=RichConsoleNotifier(console))

    run_scripted_episode(monitor, clock, seconds=15)

    console.print(Panel("Forcing tachycardia", style="yellow"))
    monitor.force_tachy()
    run_scripted_episode(monitor, clock, seconds=5)
    monitor.reset()
    run_scripted_episode(monitor, clock, seconds=5)

    console.print(Panel("Link down, forcing bradycardia", style="yellow"))
    monitor.set_connected(False)
    monitor.force_brady()
    run_scripted_episode(monitor, clock, seconds=3)
    monitor.set_thresholds(low_bpm=30, high_bpm=180)
    run_scripted_episode(monitor, clock, seconds=3)
    monitor.set_connected(True)
    monitor.reset()

    try:
        monitor.set_window(pre_sec=1, post_sec=10)
    except ConfigError as e:
        console.print(f"Rejected window change: {e}", style="yellow")

    monitor.call_guardian(0)

    console.print(state_panel(monitor.current_state()))
    console.print(log_table(monitor.logs()))

    console.print(Panel("Report", style="blue"))
    console.print(monitor.export_report_text())

    result = monitor.export_csv(export_path)
    if result.is_err():
        console.print(f"❌ Export failed: {result.unwrap_err()}", style="red")

    live = Monitor(config=config, notifier=RichConsoleNotifier(console))
    await run_live_session(live, seconds=1.0)
    console.print(f"Live driver ticked {live.driver.tick_count} times", style="green")


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("ecg_demo_export.csv")
    try:
        asyncio.run(main(target))
    except KeyboardInterrupt:
        console.print("\n👋 Demo stopped by user", style="yellow")
