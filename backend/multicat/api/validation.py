"""
Shared query parameters for API endpoints.

Category ids in filters are accepted as strings: malformed tokens are
dropped later instead of failing the request.
"""

from fastapi import Query


CategoryIdsParam = Query(None, description="Category ID filter (repeatable)")
SubmittedCategoryIdsParam = Query(
    None,
    description="Previously submitted additional category IDs (repeatable)",
)
MaxLevelsParam = Query(
    None, description="Levels of subcategories to include; empty or 0 means all"
)
LimitParam = Query(100, ge=1, le=1000, description="Maximum items to return")
SkipParam = Query(0, ge=0, le=100000, description="Number of items to skip")
