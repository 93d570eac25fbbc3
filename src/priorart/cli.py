"""
Prior-Art Ranker - CLI
======================
Interactive prior-art search, one-shot queries, or the HTTP API server.

    python -m priorart                     # interactive
    python -m priorart --query "..."       # single search
    python -m priorart --serve --port 8000 # HTTP API

License: MIT
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime

import orjson

from priorart.config import config
from priorart.models import SearchResponse
from priorart.search_agent import PriorArtSearchAgent


def print_results(response: SearchResponse) -> None:
    print(f"\n   Keywords: {', '.join(response.keywords_used) or '-'}")
    print(f"   Sources:  {', '.join(response.sources_used) or '-'}")
    print(f"   Found {response.results_found} candidates, showing {len(response.results)}\n")

    for i, r in enumerate(response.results, 1):
        print(
            f"   {i:2d}. [{r['similarity_score']:.3f}] {r['publication_number']} - {r['title'][:70]}"
            f"  (semantic={r['semantic_score']:.3f}, keyword={r['keyword_score']:.3f}, {r['source']})"
        )


def save_response(response: SearchResponse) -> str:
    config.storage.output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_path = config.storage.output_dir / f"prior_art_{timestamp}.json"
    output_path.write_bytes(orjson.dumps(response.model_dump(), option=orjson.OPT_INDENT_2))
    return str(output_path)


async def run_once(agent: PriorArtSearchAgent, query: str, session_id: str = None) -> SearchResponse:
    response = await agent.search_text(query, session_id=session_id)
    print_results(response)
    print(f"\n💾 Result saved to: {save_response(response)}")
    return response


async def interactive(agent: PriorArtSearchAgent) -> None:
    print("\n" + "=" * 70)
    print("🔎 Prior-Art Ranker - Multi-source Patent Search")
    print("=" * 70)
    print("\nDescribe your invention to search for prior art.")
    print("Type 'exit' or 'quit' to leave.\n")

    while True:
        try:
            user_input = input("\n💡 Your invention: ").strip()

            if user_input.lower() in ['exit', 'quit', 'q']:
                print("👋 Goodbye!")
                break

            if not user_input:
                print("❌ Please describe your invention.")
                continue

            await run_once(agent, user_input)

        except KeyboardInterrupt:
            print("\n👋 Goodbye!")
            break
        except Exception as e:
            logging.getLogger(__name__).exception("Search failed")
            print(f"❌ Error: {e}")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Multi-source prior-art search and ranking")
    parser.add_argument("--query", help="Run a single search for this invention text")
    parser.add_argument("--session-id", help="Store ranked results under this session")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.logging.level,
        format=config.logging.log_format,
    )

    if args.serve:
        import uvicorn
        uvicorn.run("priorart.api:app", host=args.host, port=args.port)
        return

    agent = PriorArtSearchAgent()
    if args.query:
        asyncio.run(run_once(agent, args.query, session_id=args.session_id))
    else:
        asyncio.run(interactive(agent))


if __name__ == "__main__":
    main()
