# liveplotter

Talk to an acquisition board over a serial port (921600 baud, 8N1, no flow
control), collect its live-plot samples and show readings from its power card.

## Install

    pip install .

For running the tests:

    pip install .[test]
    pytest

## Command line

    liveplotter --help
    liveplotter --list-ports
    liveplotter --port /dev/ttyUSB0 --mode plot --output plot.png
    liveplotter --port /dev/ttyUSB0 --mode power --count 10

Options:

- `--list-ports` prints the names of the serial ports present and exits.
- `-p`, `--port` names the port to open; required unless `--list-ports` is given.
- `--mode plot|power` chooses what to request (default `plot`).
- `--count N` stops after N power readings (default `0`: until Ctrl-C).
- `--notes PATH` sets the notes file (default `debug_notes.txt`).
- `--output PATH` saves the collected live plot to an image file (plot mode).
- `--interval SECONDS` sets the polling interval (default `0.01`).
- `-v`, `--verbose` prints the raw status lines from the serial handler.

In plot mode the command runs until the board signals the end of the run; in
power mode it prints each reading of the seven rails on one line. Alerts
(port errors, "Plot Completed Successfully", "Hardware Not Responding!") go to
standard error. The exit status is 1 when the port cannot be opened or the
board does not answer in time, and 0 otherwise.

Every command sent and every frame received is written, with a millisecond
timestamp, to the notes file, which is cleared when the program starts.

## Protocol

- Start command: `FF 0A FF`. The board answers with 6-byte chunks; the first
  two bytes form a big-endian 16-bit sample scaled as
  `2.5 - value * 1.5259 / 10000`. The run ends when the received data ends in
  `FF DD FF`. The last 6-byte chunk of each read is delivered to the listener
  a second time.
- Power command: `47 01 46` (the last byte is the XOR of the others). The board
  answers with a 17-byte frame starting `54 01` and ending in an XOR checksum
  of the preceding bytes. Its seven big-endian 16-bit readings are the +28 V,
  +15 V, -15 V and external 10 V rails (scaled as
  `(raw * 20.48 / 4095 - 10.24) * 3`) and the +5 V, -5 V and +3.3 V rails
  (scaled as `raw * 20.48 / 4095 - 10.24`). The power command is sent again
  after every answer until it is stopped.
- If no answer arrives in time (4 s for start, 2.5 s for power), the hardware
  is reported as not responding.

## Library use

- `liveplotter.protocol`: `start_command`, `power_command`, `xor_checksum`,
  `frame_checksum`, `hex_bytes`, `bytes_to_float`, `decode_plot_chunk`,
  `is_power_frame`, `decode_power_frame`, the scaling functions, `MessageId`
  and the `PowerReading` dataclass.
- `liveplotter.serial_handler.SerialPortHandler` opens the port, buffers
  incoming bytes (`feed`, `read_available`) and reports decoded events to a
  `HandlerListener`. A `port_factory` can be passed in place of a real port.
- `liveplotter.controller.LivePlotController` is a listener that sends the
  commands, keeps the samples in a `PlotSeries`, the latest `PowerReading`,
  status lines and alerts, and checks the response deadline with
  `response_overdue`.
- `liveplotter.notes.NotesLog` is the timestamped notes file, usable as a
  context manager.

## What it does not do

There is no graphical window: the live plot is not drawn while samples
arrive. Samples are collected in memory and, with `--output`, saved once as
an image when the run ends; power readings are printed as text.