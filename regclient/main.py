#  regclient command line entry point
import asyncio
import logging
import sys

import httpx
import structlog

from regclient.config import load_config
from regclient.errors import RegistryError
from regclient.modules.cli import parse_args
from regclient.modules.finders import stream_catalog, stream_tags
from regclient.modules.formatters import human_readable_size, is_digest_ref, parse_image_ref
from regclient.modules.keepers import download_blob, get_manifest_and_ref, has_manifest


def configure_logging(verbose=False):
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


async def run(args, config):
    async with config.build() as client:
        # --- v2 check mode ---
        if args.check_v2:
            if await client.is_v2_supported():
                print(f"[+] {config.registry} supports the Docker Registry v2 API")
            else:
                print(f"[!] {config.registry} does not look like a v2 registry")

        # --- catalog mode ---
        if args.catalog:
            print(f"[*] Fetching catalog from {config.base_url}\n")
            count = 0
            async for repository in stream_catalog(client, page_size=config.page_size):
                count += 1
                print(f"  {count}. {repository}")
            print(f"\n  Repositories:  {count}\n")

        # --- tags mode ---
        if args.tags:
            print(f"[*] Tags for: {args.tags}\n")
            count = 0
            async for tag in stream_tags(client, args.tags, page_size=config.page_size):
                count += 1
                print(f"  {count}. {tag}")
            print(f"\n  Total:  {count}\n")

        # --- exists mode ---
        if args.exists:
            name, reference = parse_image_ref(args.exists)
            if await has_manifest(client, name, reference):
                print(f"[+] {name}:{reference} exists")
            else:
                print(f"[-] {name}:{reference} not found")

        # --- manifest mode ---
        if args.manifest:
            name, reference = parse_image_ref(args.manifest)
            body, digest = await get_manifest_and_ref(client, name, reference)
            print(f"[*] Manifest for: {name}:{reference}")
            print(f"    by:     {'digest' if is_digest_ref(reference) else 'tag'}")
            print(f"    digest: {digest or '(not reported)'}")
            print(f"    size:   {human_readable_size(len(body))}")
            print("-" * 50)
            print(body.decode("utf-8", errors="replace"))

        # --- blob mode ---
        if args.blob:
            name, digest = parse_image_ref(args.blob)
            path = await download_blob(client, name, digest, output_dir=args.output_dir)
            print(f"[+] Saved blob {digest} to {path} ({human_readable_size(path.stat().st_size)})")


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(
            registry=args.registry,
            insecure=True if args.insecure else None,
            username=args.username,
            password=args.password,
            page_size=args.page_size,
        )
        asyncio.run(run(args, config))
    except (RegistryError, httpx.HTTPError, ValueError) as e:
        print(f"[!] Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nExiting.")
        sys.exit(130)
