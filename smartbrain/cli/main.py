"""
Main CLI entry point for SmartBrain

This module provides the command-line interface and the two run loops:
real-time on wall-clock timers, and a fast-forwarded simulation on a
virtual clock.
"""

import argparse
import logging
import signal
import sys
import time
from threading import Event
from typing import Optional

from ..core.config import (UDP_HOST, UDP_PORT, STATUS_INTERVAL_SEC,
                           DATA_TICK_SEC, HANDSHAKE_SEC)
from ..core.data_types import ControllerSnapshot
from ..core.errors import SmartBrainError
from ..acquisition.sources import SampleGenerator
from ..control.controller import NeuroController
from ..control.scheduler import ThreadScheduler, VirtualScheduler
from ..communication.state_sender import StateSender
from ..utils.formatting import format_duration, status_line
from ..utils.logging_setup import setup_logging


def print_summary(snapshot: ControllerSnapshot, activations: int) -> None:
    """Print an end-of-run summary"""
    scores = [point.focus_score for point in snapshot.history]
    print("-" * 60)
    print(f"Session duration:   {format_duration(snapshot.session_duration)}")
    print(f"Final focus score:  {snapshot.focus_score:.1f}")
    print(f"Final state:        {snapshot.cognitive_state.label}")
    print(f"Stimulation events: {activations}")
    if scores:
        print(f"Recent focus avg:   {sum(scores) / len(scores):.1f} "
              f"over {len(scores)} points")
    print("-" * 60)


def run_realtime(controller: NeuroController, duration: Optional[float],
                 start_session: bool = True,
                 status_interval: float = STATUS_INTERVAL_SEC) -> None:
    """
    Real-time loop on wall-clock timers

    Connects, starts a session as soon as the handshake completes and prints
    a status line periodically until `duration` seconds have passed since the
    connection came up, or a shutdown signal arrives. The previous SIGINT and
    SIGTERM handlers are restored on return.
    """
    shutdown_event = Event()

    def signal_handler(signum, frame):
        logging.info("Shutdown signal received")
        shutdown_event.set()

    previous_handlers = {
        signal.SIGINT: signal.signal(signal.SIGINT, signal_handler),
        signal.SIGTERM: signal.signal(signal.SIGTERM, signal_handler),
    }

    try:
        controller.connect()
        connected_at = None
        last_status_time = 0.0
        session_started = False

        logging.info("Real-time loop started. Press Ctrl+C to stop.")
        while not shutdown_event.is_set():
            now = time.monotonic()
            snapshot = controller.snapshot()

            if snapshot.is_connected and connected_at is None:
                connected_at = now
            if (duration is not None and connected_at is not None
                    and now - connected_at >= duration):
                break

            if start_session and not session_started and snapshot.is_connected:
                controller.start_session()
                session_started = True

            if now - last_status_time > status_interval:
                print(status_line(snapshot))
                last_status_time = now

            shutdown_event.wait(DATA_TICK_SEC)

        if controller.snapshot().session_active:
            controller.stop_session()
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)


def run_simulation(controller: NeuroController, scheduler: VirtualScheduler,
                   duration: float, start_session: bool = True,
                   status_interval: float = STATUS_INTERVAL_SEC) -> None:
    """Same sequence as run_realtime, fast-forwarded on a virtual clock"""
    controller.connect()
    scheduler.advance(controller.handshake_sec)
    if start_session:
        controller.start_session()

    elapsed = 0.0
    while elapsed < duration:
        step = min(status_interval, duration - elapsed)
        scheduler.advance(step)
        elapsed += step
        print(f"[t={scheduler.now():7.1f}] {status_line(controller.snapshot())}")

    if controller.snapshot().session_active:
        controller.stop_session()


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        description="SmartBrain - Closed-loop neurofeedback controller",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run a 30 second real-time session
  python -m smartbrain --run --duration 30

  # Fast-forward a 10 minute session on a virtual clock
  python -m smartbrain --simulate --duration 600 --seed 7

  # Stream snapshots to a display app over UDP
  python -m smartbrain --run --udp --udp-port 5005
        """
    )

    # Mode selection (mutually exclusive)
    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument("--run", action="store_true",
                            help="Run on real-time timers")
    mode_group.add_argument("--simulate", action="store_true",
                            help="Run on a virtual clock as fast as possible")

    # Session options
    parser.add_argument("--duration", type=float, default=None,
                        help="Seconds to run after connecting "
                             "(default: until Ctrl+C for --run, 60 for --simulate)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for the sample generator")
    parser.add_argument("--no-session", action="store_true",
                        help="Connect and stream without starting a session")
    parser.add_argument("--handshake", type=float, default=HANDSHAKE_SEC,
                        help=f"Simulated handshake latency (default: {HANDSHAKE_SEC})")
    parser.add_argument("--status-interval", type=float, default=STATUS_INTERVAL_SEC,
                        help=f"Seconds between status lines (default: {STATUS_INTERVAL_SEC})")

    # Communication options
    parser.add_argument("--udp", action="store_true",
                        help="Send snapshots to a display over UDP")
    parser.add_argument("--udp-host", default=UDP_HOST,
                        help=f"Display UDP host (default: {UDP_HOST})")
    parser.add_argument("--udp-port", type=int, default=UDP_PORT,
                        help=f"Display UDP port (default: {UDP_PORT})")

    # Logging
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging")

    return parser


def main(argv=None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.duration is not None and args.duration < 0:
        parser.error("--duration must not be negative")
    if args.status_interval <= 0:
        parser.error("--status-interval must be positive")

    print("=" * 60)
    print("SmartBrain - Closed-loop Neurofeedback")
    print("=" * 60)

    scheduler = VirtualScheduler() if args.simulate else ThreadScheduler()
    controller = NeuroController(
        scheduler=scheduler,
        sample_source=SampleGenerator(args.seed),
        handshake_sec=args.handshake,
    )

    sender = None
    if args.udp:
        sender = StateSender(args.udp_host, args.udp_port)
        controller.subscribe(sender, replay=False)

    try:
        if args.simulate:
            duration = args.duration if args.duration is not None else 60.0
            run_simulation(controller, scheduler, duration,
                           start_session=not args.no_session,
                           status_interval=args.status_interval)
        else:
            run_realtime(controller, args.duration,
                         start_session=not args.no_session,
                         status_interval=args.status_interval)

        print_summary(controller.snapshot(), controller.stimulation_activations)
        return 0

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 0
    except SmartBrainError as e:
        logging.error(f"Controller error: {e}")
        return 1
    finally:
        controller.shutdown()
        if sender is not None:
            sender.close()


if __name__ == "__main__":
    sys.exit(main())
