"""qrbrand CLI: write a scannable QR code PNG for a URL, optionally branded."""

import argparse
import os
import sys
from pathlib import Path

from PIL import Image

from qrbrand.config import (
    DEFAULT_ECC,
    DEFAULT_LOGO_PAD,
    DEFAULT_LOGO_SCALE,
    DEFAULT_QUIET,
    DEFAULT_SIZE,
    RenderConfig,
)
from qrbrand.errors import QRBrandError
from qrbrand.logging import audit, get_logger, setup_logging

log = get_logger("cli")

EXIT_ERROR = 1
EXIT_SCAN_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qrbrand",
        description="qrbrand: generate a scannable QR code PNG from a URL, optionally with a centered logo.",
    )
    parser.add_argument("-u", "--url", required=True,
                        help="URL to encode (e.g. https://github.com/softwarewrighter/speed-kings)")
    parser.add_argument("-i", "--image", default=None, help="Optional center image/logo (png/jpg)")
    parser.add_argument("-o", "--out", default="qrcode.png", help="Output PNG path")
    parser.add_argument("--size", type=int, default=DEFAULT_SIZE,
                        help="Size in pixels of the QR portion (square). Higher is better for video.")
    parser.add_argument("--quiet", type=int, default=DEFAULT_QUIET,
                        help="Quiet zone size in modules (border). 4 is the usual minimum.")
    parser.add_argument("--logo-scale", type=float, default=DEFAULT_LOGO_SCALE,
                        help="Logo size as a fraction of QR width (0.10..0.30 recommended)")
    parser.add_argument("--logo-plate", action=argparse.BooleanOptionalAction, default=True,
                        help="Draw a white plate behind the logo for scan reliability")
    parser.add_argument("--logo-pad", type=float, default=DEFAULT_LOGO_PAD,
                        help="Extra padding around the logo plate (fraction of logo size)")
    parser.add_argument("-e", "--ecc", default=DEFAULT_ECC, choices=["L", "M", "Q", "H"],
                        help="Error correction level (H tolerates a logo best)")
    parser.add_argument("--font", default=os.environ.get("QRBRAND_FONT"),
                        help="TrueType font for the caption (default: $QRBRAND_FONT, DejaVu Sans, Pillow's font)")

    caption = parser.add_mutually_exclusive_group()
    caption.add_argument("-s", "--show-url", action="store_true", help="Render the URL as text below the QR code")
    caption.add_argument("-a", "--alt-text", default=None,
                         help="Render alternate text below the QR code instead of the URL")

    parser.add_argument("--verify", action="store_true", help="Decode the written PNG and check it matches the URL")
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")
    return parser


def run(args) -> int:
    from qrbrand.pipeline import render, save_png, validate_url

    url = validate_url(args.url)
    config = RenderConfig.from_args(args)

    if args.show_url:
        caption = url
    else:
        caption = args.alt_text

    canvas = render(url, config, logo=args.image, caption=caption)
    out = save_png(canvas, args.out)
    print(f"Wrote {out}", file=sys.stderr)

    if args.verify:
        from qrbrand.verify import verify

        with Image.open(out) as written:
            results = verify(written, expected_data=url)
        for r in results:
            status = "PASS" if r.success else "FAIL"
            print(f"  [{r.decoder:12s}] {status} | {r.decode_time_ms:6.1f}ms | {r.decoded_data or r.error}",
                  file=sys.stderr)
        if not any(r.success for r in results):
            return EXIT_SCAN_FAILED
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else "AUDIT", log_file=args.log_file)
    audit("cli.start", logger=log, url=args.url, out=args.out, logo=args.image)

    try:
        code = run(args)
    except QRBrandError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    audit("cli.done", logger=log, out=str(Path(args.out)), exit_code=code)
    return code


if __name__ == "__main__":
    sys.exit(main())
