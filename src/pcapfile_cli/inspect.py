"""
CLI command for inspecting a capture file.
"""
import json
import logging
from datetime import datetime, timezone

import click

from pcap_loader import LoaderConfig, PcapError, read_file


def _format_time(ts_us: int) -> str:
    dt = datetime.fromtimestamp(ts_us / 1_000_000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S.%f")


@click.command()
@click.argument("filepath", type=click.Path(dir_okay=False))
@click.option("--records", "records", type=int, default=0, show_default=True,
              help="Number of packet record headers to list (0 = none)")
@click.option("--format", "format", type=click.Choice(["table", "json"]),
              default="table", show_default=True, help="Output format")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def inspect(filepath: str, records: int, format: str, verbose: bool):
    """
    Show the global header and packet summary of a PCAP file.

    Example:
      pcapfile inspect capture.pcap --records 10
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    try:
        capture = read_file(filepath, LoaderConfig(log_header=verbose))
    except PcapError as e:
        raise click.ClickException(f"[{e.stage}] {e}")

    shown = capture.packets[:max(records, 0)]

    if format == "json":
        start_us, end_us = capture.time_range
        payload = {
            "header": capture.header.to_dict(),
            "packet_count": capture.packet_count,
            "time_range": [start_us, end_us],
            "metadata": capture.metadata.to_dict(),
            "records": [
                {
                    "index": i,
                    "ts_sec": p.ts_sec,
                    "ts_usec": p.ts_usec,
                    "incl_len": p.incl_len,
                    "orig_len": p.orig_len,
                }
                for i, p in enumerate(shown, start=1)
            ],
        }
        click.echo(json.dumps(payload, separators=(",", ":"), ensure_ascii=True))
        return

    header = capture.header
    click.echo(f"File:          {capture.metadata.path} ({capture.metadata.size} bytes)")
    click.echo(f"Magic:         0x{header.magic_number:08X}")
    click.echo(f"Version:       {header.version}")
    click.echo(f"Thiszone:      {header.thiszone}")
    click.echo(f"Sigfigs:       {header.sigfigs}")
    click.echo(f"Snaplen:       {header.snaplen}")
    click.echo(f"Link type:     {header.network}")
    click.echo(f"Packets:       {capture.packet_count}")
    if capture.packets:
        start_us, end_us = capture.time_range
        click.echo(f"First packet:  {_format_time(start_us)}")
        click.echo(f"Last packet:   {_format_time(end_us)}")

    if shown:
        click.echo("")
        click.echo("#     Time(us)          Captured  Original")
        click.echo("-" * 44)
        for i, p in enumerate(shown, start=1):
            click.echo(f"{i:<5} {p.timestamp_us:<17} {p.incl_len:<9} {p.orig_len}")
