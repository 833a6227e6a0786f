import argparse
import sys
import webbrowser
from pathlib import Path

from .config import load_config
from .converter import Converter
from .html_builder import build_page
from .project import load_images, load_project, save_project


def main() -> None:
    """CLI entry point: parse arguments, convert the project, and write output HTML."""
    parser = argparse.ArgumentParser(
        prog="tex2web",
        description="Convert a LaTeX document (.tex or .zip project) to HTML",
    )
    parser.add_argument("source", type=Path, help="Path to the .tex file or .zip project")
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="Path to config.yaml (optional)"
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output HTML file path (default: <source>.html)",
    )
    parser.add_argument(
        "-i",
        "--image",
        type=Path,
        action="append",
        default=[],
        help="Image file to add to the image table (repeatable)",
    )
    parser.add_argument(
        "--fragment",
        action="store_true",
        help="Write only the HTML fragment instead of a standalone preview page",
    )
    parser.add_argument(
        "--open",
        action="store_true",
        help="Open the output HTML in the browser when done",
    )
    parser.add_argument(
        "--export-zip",
        type=Path,
        default=None,
        metavar="ZIP",
        help="Also save the project (main.tex, images, index.html) as a zip archive",
    )

    args = parser.parse_args()

    if not args.source.exists():
        print(f"Error: '{args.source}' not found.", file=sys.stderr)
        sys.exit(1)

    output_path = args.output or args.source.with_suffix(".html")

    print(f"Converting '{args.source}' …")
    try:
        config = load_config(args.config)
        project = load_project(args.source)
        project.images.update(load_images(args.image))
        fragment = Converter(config).convert(project.source, project.images)
        page = build_page(fragment, config.page, config.math)
    except Exception as exc:
        print(f"Conversion failed: {exc}", file=sys.stderr)
        sys.exit(1)

    output_path.write_text(fragment if args.fragment else page, encoding="utf-8")
    print(f"Written → {output_path}")

    if args.export_zip:
        save_project(project, args.export_zip, preview_html=page)
        print(f"Project saved → {args.export_zip}")

    if args.open:
        webbrowser.open(output_path.absolute().as_uri())


if __name__ == "__main__":
    main()
