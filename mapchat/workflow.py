import logging
from typing import List, Optional

from mapchat.data.locations import LocationDataset, default_dataset
from mapchat.filters.engine import engine
from mapchat.models import MapQueryResponse, NoQuery
from mapchat.nlp.classifier import HistoryItem, classifier

logger = logging.getLogger(__name__)


def run_map_query(
    text: str,
    history: Optional[List[HistoryItem]] = None,
    dataset: Optional[LocationDataset] = None,
) -> MapQueryResponse:
    # 1. Classification Phase
    query = classifier.classify(text, history)

    if isinstance(query, NoQuery):
        logger.info(f"Not a spatial question: {text!r}")
        return MapQueryResponse(text=text, query=query, result=None, is_spatial=False)

    # 2. Filter Phase
    result = engine.execute(query, dataset if dataset is not None else default_dataset())
    logger.info(
        f"{query.kind} query matched {len(result.locations)} locations "
        f"with {len(result.edges)} connections"
    )

    return MapQueryResponse(text=text, query=query, result=result, is_spatial=True)
