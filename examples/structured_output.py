"""Ask for a Pydantic-validated structured output."""

from typing import List

from pydantic import BaseModel, Field

from toolshape import query_formatted, structured_output
from toolshape.provider import get_provider


class MovieReview(BaseModel):
    """A structured movie review."""

    title: str
    year: int
    rating: float = Field(description="Score out of 10")
    summary: str
    pros: List[str]
    cons: List[str]


provider = get_provider("anthropic")

result = query_formatted(
    provider,
    "Review the movie 'Inception' (2010)",
    structured_output(MovieReview),
    system="You are a movie critic. Provide structured reviews.",
)
review = result.parameters
print(f"Title: {review.title}")
print(f"Year: {review.year}")
print(f"Rating: {review.rating}/10")
print(f"Summary: {review.summary}")
print(f"Pros: {review.pros}")
print(f"Cons: {review.cons}")
