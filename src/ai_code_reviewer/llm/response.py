"""
Response Parser

Turns the model's textual reply into ReviewComment objects.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from ..models.review import ModelReviewResponse, ReviewComment


logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r'^```(?:json)?\s*\n(.*?)\n?```$', re.DOTALL)


class ResponseFormatError(ValueError):
    """Model reply is not a valid review JSON object."""


@dataclass
class ResponseParseResult:
    """Outcome of parsing one model reply."""
    comments: List[ReviewComment] = field(default_factory=list)
    error: Optional[ResponseFormatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ResponseParser:
    """
    Parses `{"comments": [{"lineNumber", "comment"}]}` replies.

    Line numbers are taken as given; anchoring against the diff happens
    downstream.
    """

    def parse_result(self, response_text: str, file_path: str) -> ResponseParseResult:
        """
        Parse a reply, reporting failures instead of raising.

        Args:
            response_text: Raw model output
            file_path: Path the comments belong to

        Returns:
            ResponseParseResult with comments or an error
        """
        if not response_text or not response_text.strip():
            return ResponseParseResult()

        text = response_text.strip()
        fence_match = FENCE_PATTERN.match(text)
        if fence_match:
            text = fence_match.group(1)

        try:
            payload = ModelReviewResponse.model_validate(json.loads(text))
        except json.JSONDecodeError as e:
            return ResponseParseResult(error=ResponseFormatError(f"Invalid JSON: {e}"))
        except ValidationError as e:
            return ResponseParseResult(error=ResponseFormatError(f"Unexpected response shape: {e}"))
        except (ValueError, RecursionError) as e:
            # Integer digit limit or nesting too deep for the decoder
            return ResponseParseResult(error=ResponseFormatError(f"Invalid JSON: {e}"))

        comments = [
            ReviewComment(file_path=file_path, line_number=item.lineNumber, body=item.comment)
            for item in payload.comments
        ]
        return ResponseParseResult(comments=comments)

    def parse(self, response_text: str, file_path: str) -> List[ReviewComment]:
        """Parse a reply; malformed output logs a warning and yields no comments."""
        result = self.parse_result(response_text, file_path)
        if result.error is not None:
            logger.warning(f"Failed to parse AI response for {file_path}: {result.error}")
        return result.comments
