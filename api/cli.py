#!/usr/bin/env python3
"""
CURRENTMAP CLI Tool.

Command-line interface for dataset diagnostics and service operations:
- Dataset inspection (variables, summary)
- One-off queries printed as GeoJSON
- Serving the API
- Health checks

Usage:
    python -m api.cli inspect data/currents.nc
    python -m api.cli summary data/currents.nc
    python -m api.cli query data/currents.nc --time 59000.5 --min-lat 41 --max-lat 42
    python -m api.cli serve --port 8000
    python -m api.cli check-health
"""
import argparse
import json
import sys
from typing import Optional

from currentmap.data.netcdf_loader import VariableNames, describe
from currentmap.exceptions import DatasetError
from currentmap.store import build_dataset


def _variable_names(args) -> VariableNames:
    return VariableNames(
        u=args.var_u,
        v=args.var_v,
        time=args.var_time,
        lat=args.var_lat,
        lon=args.var_lon,
    )


def _build(args):
    return build_dataset(
        args.path,
        names=_variable_names(args),
        layer_dim=args.layer_dim or None,
        layer_index=args.layer_index,
    )


def inspect_dataset(path: str) -> None:
    """List the variables of a NetCDF file."""
    variables = describe(path)

    print("\n" + "=" * 80)
    print(f"VARIABLES IN {path}")
    print("=" * 80)
    print(f"{'Name':<16} {'Dims':<30} {'Shape':<20} {'Type':<10}")
    print("-" * 80)
    for var in variables:
        print(
            f"{var['name'][:15]:<16} "
            f"{', '.join(var['dims'])[:29]:<30} "
            f"{'x'.join(str(s) for s in var['shape']) or 'scalar':<20} "
            f"{var['dtype']:<10}"
        )
    print("=" * 80)
    print(f"Total: {len(variables)} variable(s)\n")


def print_summary(args) -> None:
    """Build the dataset and print its summary."""
    summary = _build(args).summary()
    counts = summary["features_per_time"]

    print("\n" + "=" * 60)
    print("CURRENT DATASET SUMMARY")
    print("=" * 60)
    print(f"\nSource: {summary['source']}")
    print(f"Time steps: {summary['num_times']}")
    print(f"Points per step: {summary['num_points']}")
    print(f"Time range: {summary['time_start']} .. {summary['time_end']} ({summary['time_units'] or 'no units'})")
    print(f"Features per step: min {counts['min']}, max {counts['max']}, total {counts['total']}")
    print("=" * 60 + "\n")


def run_query(args) -> None:
    """Build the dataset, run a single query and print the GeoJSON."""
    dataset = _build(args)
    collection = dataset.get_feature_collection(
        args.time, args.min_lat, args.max_lat, args.min_lon, args.max_lon
    )
    json.dump(collection.to_geojson(), sys.stdout, indent=args.indent)
    sys.stdout.write("\n")


def serve(host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the API server."""
    from api.main import run

    run(host=host, port=port, reload=reload)


def check_health(url: str) -> None:
    """Check API health."""
    import requests

    try:
        response = requests.get(url, timeout=5)
        if response.status_code == 200:
            data = response.json()
            print(f"\nAPI Status: {data.get('status', 'unknown')}")
            print(f"Version: {data.get('version', 'unknown')}")
            print(f"Timestamp: {data.get('timestamp', 'unknown')}")
        else:
            print(f"\nAPI returned status code: {response.status_code}")
            sys.exit(1)
    except requests.exceptions.ConnectionError:
        print("\nError: Could not connect to API. Is the server running?")
        sys.exit(1)


def _add_dataset_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="NetCDF dataset file")
    names = VariableNames()
    parser.add_argument("--var-u", default=names.u, help=f"Eastward velocity variable (default: {names.u})")
    parser.add_argument("--var-v", default=names.v, help=f"Northward velocity variable (default: {names.v})")
    parser.add_argument("--var-time", default=names.time, help=f"Time variable (default: {names.time})")
    parser.add_argument("--var-lat", default=names.lat, help=f"Latitude variable (default: {names.lat})")
    parser.add_argument("--var-lon", default=names.lon, help=f"Longitude variable (default: {names.lon})")
    parser.add_argument(
        "--layer-dim",
        default="siglay",
        help="Vertical layer dimension of u/v, empty to disable (default: siglay)"
    )
    parser.add_argument("--layer-index", type=int, default=0, help="Layer to use (default: 0, surface)")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="CURRENTMAP CLI Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  List the variables of a dataset:
    python -m api.cli inspect data/currents.nc

  Summarize a dataset:
    python -m api.cli summary data/currents.nc --var-lat lat --var-lon lon

  Query one time step inside a bounding box:
    python -m api.cli query data/currents.nc --time 59000.5 --min-lat 41 --max-lat 42

  Run the API:
    python -m api.cli serve --port 8000

  Check API health:
    python -m api.cli check-health
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # inspect
    inspect_parser = subparsers.add_parser("inspect", help="List variables in a NetCDF file")
    inspect_parser.add_argument("path", help="NetCDF dataset file")

    # summary
    summary_parser = subparsers.add_parser("summary", help="Build a dataset and print its summary")
    _add_dataset_arguments(summary_parser)

    # query
    query_parser = subparsers.add_parser("query", help="Print the GeoJSON for a time and bounding box")
    _add_dataset_arguments(query_parser)
    query_parser.add_argument("--time", type=float, required=True, help="Time in dataset units")
    query_parser.add_argument("--min-lat", type=float, default=-90.0)
    query_parser.add_argument("--max-lat", type=float, default=90.0)
    query_parser.add_argument("--min-lon", type=float, default=-180.0)
    query_parser.add_argument("--max-lon", type=float, default=180.0)
    query_parser.add_argument("--indent", type=int, default=None, help="JSON indentation")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")

    # check-health
    health_parser = subparsers.add_parser("check-health", help="Check API health")
    health_parser.add_argument("--url", default="http://localhost:8000/api/health")

    args = parser.parse_args(argv)

    try:
        if args.command == "inspect":
            inspect_dataset(args.path)
        elif args.command == "summary":
            print_summary(args)
        elif args.command == "query":
            run_query(args)
        elif args.command == "serve":
            serve(args.host, args.port, args.reload)
        elif args.command == "check-health":
            check_health(args.url)
        else:
            parser.print_help()
            sys.exit(1)
    except DatasetError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
