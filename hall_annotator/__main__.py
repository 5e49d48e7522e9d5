from __future__ import annotations

import argparse
import logging

from .catalog import CatalogProvider
from .config import ConfigError, load_settings
from .controller import AnnotationController
from .evaluator import ColorShiftStrategy, RandomStrategy
from .grid import GridError
from .render import render_summary


class CliError(Exception):
    pass


def parse_row_spec(spec: str) -> tuple[str, int]:
    name, sep, count = spec.rpartition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME:COUNT, got {spec!r}")
    try:
        return name.strip(), int(count)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"seat count must be an integer in {spec!r}") from e


def _provider(args: argparse.Namespace) -> CatalogProvider:
    settings = load_settings()
    return CatalogProvider(args.catalog_url or settings.catalog_url, timeout=settings.catalog_timeout)


def cmd_catalog(args: argparse.Namespace) -> int:
    catalog = _provider(args).get()
    print(f"Catalog ({catalog.source})")
    for entity in catalog.entities:
        print(f"{entity.id}: {entity.name}")
        for hall in catalog.halls_for(entity.id):
            print(f"  {hall.id}: {hall.name}")
            for camera in catalog.cameras_for(hall.id):
                print(f"    {camera.id}: {camera.name}")
    return 0


def cmd_annotate(args: argparse.Namespace) -> int:
    # GUI import kept local so the other commands work on headless hosts.
    from .window import AnnotatorWindow

    settings = load_settings()
    catalog = _provider(args).get()
    camera = catalog.camera(args.camera)
    if camera is None:
        known = ", ".join(c.id for c in catalog.cameras) or "none"
        raise CliError(f"unknown camera {args.camera!r} (known: {known})")

    if args.random_occupancy:
        strategy = RandomStrategy(seed=args.seed)
    else:
        strategy = ColorShiftStrategy(settings.occupancy_threshold)
    controller = AnnotationController(canvas_size=settings.canvas_size, strategy=strategy)
    controller.select_camera(camera)
    for name, count in args.row:
        if controller.add_row(name, count) is None:
            raise GridError(f"could not add row {name!r} with {count} seats")

    AnnotatorWindow(controller, window_name=f"{camera.name} - Hall View", images=args.image).run()
    print(render_summary(controller.hall))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("backend.app.main:app", host=args.host, port=args.port, reload=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hall_annotator", description="Cinema hall seat annotation tool.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_catalog = sub.add_parser("catalog", help="List entities, halls and cameras")
    p_catalog.add_argument("--catalog-url", help="Catalog endpoint (default: $HALL_ANNOTATOR_CATALOG_URL)")
    p_catalog.set_defaults(func=cmd_catalog)

    p_annotate = sub.add_parser("annotate", help="Open the annotation window for a camera")
    p_annotate.add_argument("--catalog-url", help="Catalog endpoint (default: $HALL_ANNOTATOR_CATALOG_URL)")
    p_annotate.add_argument("--camera", required=True, help="Camera id from the catalog")
    p_annotate.add_argument("--image", action="append", default=[], help="Hall image path or data URL (repeatable)")
    p_annotate.add_argument(
        "--row", action="append", type=parse_row_spec, default=[], help="Row to create, e.g. A:20 (repeatable)"
    )
    p_annotate.add_argument("--random-occupancy", action="store_true", help="Use the random occupancy placeholder")
    p_annotate.add_argument("--seed", type=int, help="Seed for --random-occupancy")
    p_annotate.set_defaults(func=cmd_annotate)

    p_serve = sub.add_parser("serve", help="Run the catalog service")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.set_defaults(func=cmd_serve)

    return p


def main(argv=None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    try:
        settings = load_settings()
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        return int(args.func(args))
    except (CliError, ConfigError, GridError) as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
