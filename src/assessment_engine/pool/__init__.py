"""Question pool: records, validation, sampling and storage seams."""

from .models import (
    Category,
    Difficulty,
    Question,
    TestKind,
    build_category_index,
    category_descendants,
    create_question,
)
from .repository import (
    CategoryRepository,
    InMemoryCategoryRepository,
    InMemoryQuestionRepository,
    InMemoryResultRepository,
    JsonlCategoryRepository,
    JsonlQuestionRepository,
    JsonlResultRepository,
    QuestionRepository,
    RepositoryError,
    ResultRepository,
)
from .sampler import (
    Predicate,
    all_of,
    has_tags,
    in_categories,
    require_questions,
    sample,
    with_difficulty,
    with_ids,
)

__all__ = [
    "Category",
    "Difficulty",
    "Question",
    "TestKind",
    "build_category_index",
    "category_descendants",
    "create_question",
    "CategoryRepository",
    "QuestionRepository",
    "ResultRepository",
    "RepositoryError",
    "InMemoryCategoryRepository",
    "InMemoryQuestionRepository",
    "InMemoryResultRepository",
    "JsonlCategoryRepository",
    "JsonlQuestionRepository",
    "JsonlResultRepository",
    "Predicate",
    "all_of",
    "has_tags",
    "in_categories",
    "require_questions",
    "sample",
    "with_difficulty",
    "with_ids",
]
