# CLI argument parsing for regclient

import argparse
import sys


def build_parser():
    p = argparse.ArgumentParser(
        prog="regclient",
        description="Explore a Docker Registry v2: repositories, tags, manifests and blobs.",
    )
    p.add_argument(
        "--registry", "-r",
        dest="registry",
        default=None,
        help="Registry host[:port] (default: $REGISTRY_HOST or registry-1.docker.io)",
    )
    p.add_argument(
        "--insecure",
        action="store_true",
        help="Use plain http instead of https",
    )
    p.add_argument(
        "--username", "-u",
        dest="username",
        default=None,
        help="Username for the registry's token service",
    )
    p.add_argument(
        "--password", "-p",
        dest="password",
        default=None,
        help="Password for the registry's token service",
    )
    p.add_argument(
        "--page-size",
        dest="page_size",
        type=int,
        default=None,
        help="Entries per page requested for catalog and tag listings",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every request and token exchange",
    )
    # Modes
    p.add_argument(
        "--check-v2",
        action="store_true",
        help="Check whether the registry speaks the v2 API",
    )
    p.add_argument(
        "--catalog",
        action="store_true",
        help="List repositories",
    )
    p.add_argument(
        "--tags",
        dest="tags",
        metavar="REPO",
        help="List tags of a repository (e.g., library/ubuntu)",
    )
    p.add_argument(
        "--manifest",
        dest="manifest",
        metavar="REPO:REF",
        help="Print a manifest by tag or digest (repo:tag or repo@sha256:...)",
    )
    p.add_argument(
        "--exists",
        dest="exists",
        metavar="REPO:REF",
        help="Check whether a manifest exists (repo:tag or repo@sha256:...)",
    )
    p.add_argument(
        "--blob",
        dest="blob",
        metavar="REPO@DIGEST",
        help="Download a blob by digest and verify it",
    )
    p.add_argument(
        "--output-dir", "-o",
        dest="output_dir",
        default=".",
        help="Output directory for downloaded blobs (default: current dir)",
    )
    return p


def parse_args(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    # Show help if no mode selected
    if not any([args.check_v2, args.catalog, args.tags, args.manifest, args.exists, args.blob]):
        p.print_help()
        sys.exit(0)
    return args
