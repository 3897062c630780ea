"""
Command-line interface for newsseo.
"""
import os
import sys
import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import tqdm
import yaml
from aiohttp import web
from dotenv import load_dotenv

from newsseo.config import Config, SiteSettings
from newsseo.core.exceptions import NewsSeoError
from newsseo.core.store import ArticleStore
from newsseo.formatters.amp import AmpRenderer
from newsseo.formatters.html import ArticlePageRenderer
from newsseo.formatters.sitemap import SitemapGenerator
from newsseo.utils.http import SitemapPinger
from newsseo.web.app import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(cfg: Config, verbose: bool = False) -> None:
    """
    Configure root logging from the ``logging`` config section.

    Args:
        cfg: Loaded configuration
        verbose: Force DEBUG level
    """
    level = logging.DEBUG if verbose else getattr(logging, str(cfg.get('logging.level', 'INFO')).upper(), logging.INFO)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_file = cfg.get('logging.file')
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="newsseo - sitemap, structured data and AMP for a news site")
    parser.add_argument("--config", help="Path to a YAML or JSON config file", default=os.getenv('NEWSSEO_CONFIG_PATH'))
    parser.add_argument("--db", help="Path to the article database (overrides store.path)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the web server")
    serve.add_argument("--host", help="Bind address")
    serve.add_argument("--port", type=int, help="Bind port")

    load = subparsers.add_parser("import", help="Import articles from a JSON or YAML file")
    load.add_argument("file", help="File containing a list of articles")

    sitemap = subparsers.add_parser("sitemap", help="Print or write the sitemap")
    sitemap.add_argument("--output", help="Write to this file instead of stdout")

    amp = subparsers.add_parser("amp", help="Print the AMP page of one article")
    amp.add_argument("slug", help="Article slug")

    export = subparsers.add_parser("export", help="Write the sitemap and every page to a directory")
    export.add_argument("output_dir", help="Output directory")

    subparsers.add_parser("ping", help="Notify search engines about the sitemap")

    return parser.parse_args(argv)


def load_records(path: str) -> List[Dict[str, Any]]:
    """
    Read article records from a JSON or YAML file.

    The file holds either a list of articles or a mapping with an
    ``articles`` list.
    """
    file_path = Path(path)
    with open(file_path, 'r', encoding='utf-8') as f:
        if file_path.suffix.lower() in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif file_path.suffix.lower() == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported article file format: {file_path.suffix}")

    if isinstance(data, dict):
        data = data.get('articles', [])
    if not isinstance(data, list):
        raise ValueError(f"{file_path} does not contain a list of articles")
    return data


def export_site(store: ArticleStore, settings: SiteSettings, output_dir: str) -> Dict[str, int]:
    """
    Write the sitemap, robots.txt and all article pages to a directory.

    Args:
        store: Article store
        settings: Site settings
        output_dir: Output directory

    Returns:
        Counts of written and skipped articles
    """
    root = Path(output_dir)
    root.mkdir(parents=True, exist_ok=True)

    articles = store.all()
    generator = SitemapGenerator(settings)
    generator.write(articles, root / "sitemap.xml")
    (root / "robots.txt").write_text(generator.render_robots(), encoding="utf-8")

    page_renderer = ArticlePageRenderer(settings)
    amp_renderer = AmpRenderer(settings)

    written = 0
    skipped = 0
    with tqdm.tqdm(total=len(articles), desc="Exporting articles") as pbar:
        for article in articles:
            try:
                amp_page = amp_renderer.render(article)
            except NewsSeoError as e:
                logger.warning(f"Skipping {article.slug}: {e}")
                skipped += 1
                continue
            finally:
                pbar.update(1)

            article_dir = root / article.path.lstrip('/')
            (article_dir / "amp").mkdir(parents=True, exist_ok=True)
            (article_dir / "index.html").write_text(page_renderer.render(article), encoding="utf-8")
            (article_dir / "amp" / "index.html").write_text(amp_page, encoding="utf-8")
            written += 1

    logger.info(f"Exported {written} articles to {root}")
    if skipped:
        logger.warning(f"Skipped {skipped} articles")
    return {"written": written, "skipped": skipped}


def run(args, cfg: Config) -> int:
    """
    Dispatch a parsed command.

    Returns:
        Process exit code
    """
    settings = SiteSettings.from_config(cfg)
    store = ArticleStore(args.db or cfg.get('store.path'))

    if args.command == "serve":
        host = args.host or cfg.get('server.host')
        port = args.port or int(cfg.get('server.port'))
        logger.info(f"Serving {settings.base_url} on {host}:{port}")
        web.run_app(create_app(settings, store), host=host, port=port)
        return 0

    if args.command == "import":
        records = load_records(args.file)
        count = store.import_records(records)
        print(f"Imported {count} articles")
        return 0

    if args.command == "sitemap":
        generator = SitemapGenerator(settings)
        if args.output:
            generator.write(store.all(), args.output)
        else:
            sys.stdout.write(generator.render(store.all()).decode('utf-8'))
            sys.stdout.write("\n")
        return 0

    if args.command == "amp":
        article = store.get(args.slug)
        if article is None:
            logger.error(f"Article not found: {args.slug}")
            return 1
        print(AmpRenderer(settings).render(article))
        return 0

    if args.command == "export":
        counts = export_site(store, settings, args.output_dir)
        return 0 if not counts["skipped"] else 1

    if args.command == "ping":
        pinger = SitemapPinger(cfg.get('ping.endpoints') or [], timeout=int(cfg.get('ping.timeout_seconds', 10)))
        results = pinger.ping_all(settings.sitemap_url)
        return 0 if all(results.values()) else 1

    logger.error(f"Unknown command: {args.command}")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the command-line script.
    """
    # Explicitly reload environment variables from .env file
    load_dotenv(override=True)

    args = parse_args(argv)
    try:
        cfg = Config(args.config)
        setup_logging(cfg, args.verbose)
        return run(args, cfg)
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except (NewsSeoError, ValueError, OSError, yaml.YAMLError) as e:
        logger.error(f"{e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
