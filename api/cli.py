#!/usr/bin/env python3
"""CLI for Phuckery University certificate tasks.

Usage:
    python -m cli <command>

Commands:
    render   Render a certificate to a local PDF or PNG file
    styles   List the available certificate styles
"""

import argparse
import logging
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def cmd_styles() -> int:
    """Print each style with its background file and name treatment."""
    from rendering.styles import STYLES

    for key, style in STYLES.items():
        print(f"{key:<12} {style.background:<40} {style.name_transform.value}")
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    """Render a certificate without starting the server."""
    from rendering.certificates import render_certificate
    from rendering.errors import CertificateRenderingError, ResourceMissingError
    from rendering.text import CertificateFields

    fields = CertificateFields(
        first_name=args.first_name,
        last_name=args.last_name,
        degree_level=args.degree_level,
        faculty=args.faculty,
        achievement=args.achievement,
        certification_date=args.date,
    )
    output_format = args.format or (
        "png" if args.output.suffix.lower() == ".png" else "pdf"
    )

    try:
        rendered = render_certificate(
            fields, args.style, output_format, png_scale=args.scale
        )
    except ResourceMissingError as e:
        logger.error(str(e))
        for path in e.searched:
            logger.error(f"  searched: {path}")
        return 1
    except CertificateRenderingError as e:
        logger.error(str(e))
        return 1

    args.output.write_bytes(rendered.content)
    logger.info(f"Wrote {len(rendered.content)} bytes to {args.output}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Phuckery University CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("styles", help="List the available certificate styles")

    render = subparsers.add_parser("render", help="Render a certificate locally")
    render.add_argument("--style", required=True)
    render.add_argument("--first-name", required=True)
    render.add_argument("--last-name", required=True)
    render.add_argument("--degree-level", required=True)
    render.add_argument("--faculty", required=True)
    render.add_argument("--achievement", required=True)
    render.add_argument("--date", default=None, help="Certification date text")
    render.add_argument("--format", choices=["pdf", "png"], default=None)
    render.add_argument("--scale", type=float, default=2.0, help="PNG scale factor")
    render.add_argument(
        "-o", "--output", type=Path, default=Path("certificate.pdf")
    )

    args = parser.parse_args()

    if args.command == "styles":
        return cmd_styles()
    elif args.command == "render":
        return cmd_render(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
