"""
Send a file to a pdfsink listener like a printer driver would (raw, port 9100 style).

    pdfsink-send --host 127.0.0.1 --port 9100 --file doc.pdf --job-name report
"""

import argparse
import pathlib
import socket
import sys
from typing import List, Optional

CHUNK = 1024


def pjl_preamble(job_name: str) -> bytes:
    """Minimal PJL job header as sent in front of PDF data by print spoolers."""
    return (
        b"\x1b%-12345X@PJL JOB NAME=\"" + job_name.encode() + b"\"\n"
        b"@PJL ENTER LANGUAGE=PDF\n"
    )


def send_bytes(host: str, port: int, data: bytes, *, chunk_size: int = CHUNK) -> int:
    with socket.create_connection((host, port)) as s:
        for i in range(0, len(data), chunk_size):
            s.sendall(data[i:i + chunk_size])
        # signal end of job, the receiver stores the document on close
        s.shutdown(socket.SHUT_WR)
    return len(data)


def send_file(host: str, port: int, path, *, preamble: bytes = b"", chunk_size: int = CHUNK) -> int:
    data = pathlib.Path(path).read_bytes()
    return send_bytes(host, port, preamble + data, chunk_size=chunk_size)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="pdfsink-send")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=9100)
    ap.add_argument("--file", required=True)
    ap.add_argument("--job-name", help="wrap the file in a PJL job with this name")
    args = ap.parse_args(argv)

    preamble = pjl_preamble(args.job_name) if args.job_name else b""
    try:
        sent = send_file(args.host, args.port, args.file, preamble=preamble)
    except OSError as e:
        print(f"[SEND] Failed: {e}", file=sys.stderr)
        return 1
    print(f"[SEND] Sent {args.file} ({sent} bytes) to {args.host}:{args.port}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
