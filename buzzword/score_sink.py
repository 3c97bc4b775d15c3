"""
Best-score reporting.

The reporter keeps only the highest unsent score. report() just records it;
flush() does the blocking submit and is meant to run off the event loop
(RoundStateMachine.flush_best_score). When the sink is unavailable the
pending score survives until the next flush() and is never lowered by a
smaller report.

Sinks:
- LocalScoreSink:  JSON file, keeps the max ever submitted
- DynamoScoreSink: DynamoDB item per player, conditional put (only if higher)
"""

import json
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import GameSettings

logger = logging.getLogger(__name__)


class ScoreSink(Protocol):
    def submit(self, score: int) -> bool:
        """Persist score if it beats the stored one. True when the sink is up to date."""
        ...


class LocalScoreSink:
    def __init__(self, path: Union[str, Path] = "game_data/best_score.json"):
        self.path = Path(path)

    def load(self) -> int:
        if not self.path.exists():
            return 0
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return max(0, int(json.load(f).get("best_score", 0)))
        except (OSError, ValueError, AttributeError, TypeError) as e:
            logger.warning(f"[SCORE] Could not read {self.path}: {e}")
            return 0

    def submit(self, score: int) -> bool:
        current = self.load()
        if score <= current:
            return True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump({"best_score": int(score), "updated_at": datetime.now().isoformat()}, f, indent=2)
        except OSError as e:
            logger.warning(f"[SCORE] Could not write {self.path}: {e}")
            return False
        logger.info(f"[SCORE] Saved best score {score} to {self.path}")
        return True


class DynamoScoreSink:
    """One item per player: {player_id, best_score, updated_at}."""

    def __init__(self, table_name: str, player_id: str = "local", table=None):
        self.player_id = player_id
        if table is None:
            dynamodb = boto3.resource('dynamodb', region_name=os.getenv('AWS_REGION') or None)
            table = dynamodb.Table(table_name)
        self.table = table

    def load(self) -> int:
        try:
            response = self.table.get_item(Key={'player_id': self.player_id})
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"[SCORE] DynamoDB read failed: {e}")
            return 0
        item = response.get('Item') or {}
        return int(item.get('best_score', 0))

    def submit(self, score: int) -> bool:
        try:
            self.table.put_item(
                Item={
                    'player_id': self.player_id,
                    'best_score': int(score),
                    'updated_at': datetime.now().isoformat(),
                },
                ConditionExpression='attribute_not_exists(player_id) OR best_score < :score',
                ExpressionAttributeValues={':score': int(score)},
            )
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                # Stored score is already at least as high
                return True
            logger.warning(f"[SCORE] DynamoDB write failed: {e}")
            return False
        except BotoCoreError as e:
            logger.warning(f"[SCORE] DynamoDB unavailable: {e}")
            return False
        logger.info(f"[SCORE] Submitted best score {score} for {self.player_id}")
        return True


class BestScoreReporter:
    def __init__(self, sink: Optional[ScoreSink] = None):
        self.sink = sink
        self.pending = 0
        self._lock = threading.Lock()

    def report(self, score: int) -> None:
        if score <= 0:
            return
        self.pending = max(self.pending, int(score))

    def flush(self) -> bool:
        """Try to send the pending score. Returns True when nothing is left pending."""
        if self.sink is None:
            return self.pending <= 0
        with self._lock:
            score = self.pending
            if score <= 0:
                return True
            try:
                ok = self.sink.submit(score)
            except (OSError, ClientError, BotoCoreError) as e:
                logger.warning(f"[SCORE] Sink raised while submitting {score}: {e}")
                ok = False
            if ok:
                # A higher score may have been reported while submitting
                if self.pending <= score:
                    self.pending = 0
                return self.pending == 0
        logger.warning(f"[SCORE] Best score {score} kept pending for retry")
        return False


def build_score_sink(settings: GameSettings) -> Optional[ScoreSink]:
    kind = (settings.best_score_sink or "none").lower()
    if kind == "local":
        return LocalScoreSink(settings.best_score_file)
    if kind == "dynamodb":
        return DynamoScoreSink(settings.best_score_table, player_id=settings.player_id)
    if kind != "none":
        logger.warning(f"[SCORE] Unknown BEST_SCORE_SINK '{kind}'; best score will not be stored")
    return None
