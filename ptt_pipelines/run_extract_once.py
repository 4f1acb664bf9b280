from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from ptt_pipelines.errors import PttExtractionError
from ptt_pipelines.export import export_filename, write_csv
from ptt_pipelines.extractor import PttExtractor
from ptt_pipelines.fetcher import PttFetcher
from ptt_pipelines.http_client import HttpClient, HttpConfig
from ptt_pipelines.models import Post
from ptt_pipelines.settings import PttSettings, load_settings

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ptt_pipelines.run_extract_once",
        description="Extract a PTT post from a URL or pasted text.",
    )
    parser.add_argument("input", nargs="?", help="Article URL or raw text (default: read stdin).")
    parser.add_argument("--file", help="Read the input from this file instead.")
    parser.add_argument(
        "--csv",
        nargs="?",
        const="",
        help="Write comments as CSV (optional path; default name derived from the post date).",
    )
    parser.add_argument("--analyze", action="store_true", help="Run the local sentiment model on the comments.")
    return parser


def _read_input(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.input is not None:
        return args.input
    return sys.stdin.read()


def build_extractor(s: PttSettings) -> PttExtractor:
    http = HttpClient(
        HttpConfig(
            timeout_sec=s.request_timeout_sec,
            delay_sec=s.request_delay_sec,
            max_retries=s.max_retries,
            backoff_base_sec=s.backoff_base_sec,
            backoff_max_sec=s.backoff_max_sec,
            user_agent=s.user_agent,
        )
    )
    return PttExtractor(fetcher=PttFetcher(http, s.fetch_endpoints))


def _analyze(post: Post, s: PttSettings) -> dict[str, object]:
    # torch/transformers are only imported when analysis is requested
    from ptt_pipelines.sentiment_model import SentimentModel, SentimentModelConfig
    from ptt_pipelines.sentiment_pipeline import analyze_post

    model = SentimentModel(
        SentimentModelConfig(
            model_path=s.sentiment_model_path,
            model_version=s.sentiment_model_version,
            batch_size=s.sentiment_batch_size,
            max_length=s.sentiment_max_length,
            neutral_floor=s.sentiment_neutral_floor,
            device=s.sentiment_device,
        )
    )
    analysis = analyze_post(
        post,
        model,
        comment_budget=s.sentiment_comment_budget,
        threshold=s.sentiment_bullish_threshold,
    )
    return analysis.to_dict()


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    args = _build_parser().parse_args(argv)
    s = load_settings()

    try:
        post = build_extractor(s).extract(_read_input(args))
    except PttExtractionError as e:
        print(f"Extraction failed: {e}", file=sys.stderr)
        return 1

    logger.info("Extracted post: title=%s comments=%s", post.title, post.stats.total)

    out: dict[str, object] = {
        "title": post.title,
        "author": post.author,
        "date": post.date,
        "source": post.source,
        "stats": post.to_dict()["stats"],
        "body_preview": (post.body[:120] + "…") if len(post.body) > 120 else post.body,
        "comments_preview": [c.render_line() for c in post.comments[:10]],
    }

    if args.csv is not None:
        path = write_csv(post.comments, args.csv or export_filename(post))
        out["csv"] = str(path)

    if args.analyze:
        out["analysis"] = _analyze(post, s)

    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
