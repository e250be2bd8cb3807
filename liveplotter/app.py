"""Command-line front end: talk to the board and show what it sends."""

from __future__ import annotations

import argparse
import sys
import time

from .controller import LivePlotController, PlotSeries
from .notes import DEFAULT_NOTES_PATH, NotesLog
from .protocol import PowerReading
from .serial_handler import SerialPortHandler

RAIL_LABELS = ("+28V", "+15V", "-15V", "EXT 10V", "+5V", "-5V", "+3.3V")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liveplotter",
        description="Acquire live-plot samples or power-card readings over a serial port.",
    )
    parser.add_argument("--list-ports", action="store_true", help="list serial ports and exit")
    parser.add_argument("-p", "--port", help="serial port to open")
    parser.add_argument(
        "--mode", choices=("plot", "power"), default="plot", help="what to request from the board"
    )
    parser.add_argument(
        "--count", type=int, default=0, help="power readings to take (0: until interrupted)"
    )
    parser.add_argument("--notes", default=DEFAULT_NOTES_PATH, help="debug notes file")
    parser.add_argument("--output", help="save the live plot to this image file")
    parser.add_argument("--interval", type=float, default=0.01, help="polling interval in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="print raw status lines")
    return parser


def _format_reading(reading: PowerReading) -> str:
    return "  ".join(
        f"{label}: {value:.3f}" for label, value in zip(RAIL_LABELS, reading.as_list())
    )


def _save_plot(series: PlotSeries, path: str) -> None:
    from matplotlib.figure import Figure

    figure = Figure()
    axes = figure.add_subplot()
    axes.plot(series.x, series.y, color="blue", linestyle="-")
    axes.set_xlabel("Sample Number")
    axes.set_ylabel("Scaled Value")
    low_x, high_x = series.x_range()
    if low_x < high_x:
        axes.set_xlim(low_x, high_x)
    if series.y:
        low_y, high_y = series.y_range()
        if low_y < high_y:
            axes.set_ylim(low_y, high_y)
    figure.savefig(path)


class _Reporter:
    def __init__(self, controller: LivePlotController, verbose: bool) -> None:
        self.controller = controller
        self.verbose = verbose
        self._alerts = 0
        self._lines = 0

    def flush(self) -> None:
        for alert in self.controller.alerts[self._alerts :]:
            print(f"{alert.title}: {alert.text}", file=sys.stderr)
        self._alerts = len(self.controller.alerts)
        if self.verbose:
            for line in self.controller.status_lines[self._lines :]:
                print(line)
        self._lines = len(self.controller.status_lines)


def _run(controller: LivePlotController, args: argparse.Namespace) -> int:
    reporter = _Reporter(controller, args.verbose)
    if not controller.select_port(args.port):
        reporter.flush()
        return 1
    reporter.flush()

    if args.mode == "plot":
        controller.start()
    else:
        controller.get_power()

    shown = 0
    try:
        while True:
            controller.handler.read_available()
            reporter.flush()
            if args.mode == "power":
                if controller.readings_received > shown and controller.power is not None:
                    shown = controller.readings_received
                    print(_format_reading(controller.power))
                if args.count and shown >= args.count:
                    controller.stop_power()
                    break
            elif controller.plot_finished:
                break
            if controller.response_overdue(time.monotonic()):
                reporter.flush()
                return 1
            time.sleep(args.interval)
    except KeyboardInterrupt:
        controller.stop_power()

    if args.output and args.mode == "plot":
        _save_plot(controller.series, args.output)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = SerialPortHandler()

    if args.list_ports:
        for name in handler.available_ports():
            print(name)
        return 0
    if not args.port:
        parser.error("a port is required unless --list-ports is given")

    with NotesLog(args.notes) as notes:
        notes.reset()
        notes.write("*****  Application Started  *****")
        controller = LivePlotController(handler, notes)
        try:
            return _run(controller, args)
        finally:
            handler.close()
            notes.write("****** Application Closed ******")


if __name__ == "__main__":
    sys.exit(main())