import json
import logging
import os
import sys

# Add the project root directory to the python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from mapchat.core.config import settings
from mapchat.data.locations import default_dataset
from mapchat.filters.engine import engine
from mapchat.nlp.classifier import classifier, scan_text
from mapchat.nlp.suggestions import suggestion_generator

# Setup logging to file and console
os.makedirs(settings.LOG_DIR, exist_ok=True)
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(settings.TRACE_LOG_PATH),
    ],
)
logger = logging.getLogger("trace_query")


def trace_query(text: str, history=None):
    logger.info("=" * 60)
    logger.info(f"QUERY: {text}")
    logger.info("=" * 60)

    # 1. Scan Phase
    logger.info("--- [Phase 1] Text Scan ---")
    scan = scan_text(text.lower())
    for mention, radius in zip(scan.mentions, scan.radii):
        snippet = scan.text[mention.start : mention.end]
        logger.info(f"  Mention {snippet!r} -> {mention.category.value} (radius: {radius})")
    logger.info(f"  Near cues: {[scan.text[s:e] for s, e in scan.near_cues]}")
    logger.info(f"  Far cues: {[scan.text[s:e] for s, e in scan.far_cues]}")

    # 2. Classification Phase
    logger.info("--- [Phase 2] Classifier ---")
    query = classifier.classify(text, history)
    logger.info(f"Query:\n{json.dumps(query.model_dump(mode='json'), indent=2)}")

    # 3. Filter Phase
    logger.info("--- [Phase 3] Proximity Filter ---")
    result = engine.execute(query, default_dataset())
    logger.info(f"Echo: {result.echo_text}")
    logger.info(f"Total Locations: {len(result.locations)}")
    for i, location in enumerate(result.locations[:10]):
        logger.info(f"  [{i+1}] {location.name} {location.coordinates}")
    for edge in result.edges[:10]:
        logger.info(
            f"  {edge.source} -> {edge.target} "
            f"({edge.target_category.value}, {edge.distance:.2f} mi)"
        )
    for edge in result.diagnostics:
        logger.info(f"  Excluded by {edge.target} at {edge.distance:.2f} mi")

    return query


def main():
    history = []
    questions = sys.argv[1:] or [
        "show properties within 2 miles of fedex and 4 miles away from starbucks",
        "find properties within 2 miles of fedex and 3 miles of starbucks",
        "what about 8 miles?",
    ]
    for question in questions:
        trace_query(question, history)
        history.append({"role": "user", "content": question})

    logger.info("--- Suggestions ---")
    for suggestion in suggestion_generator.suggest(history):
        logger.info(f"  {suggestion}")


if __name__ == "__main__":
    main()
