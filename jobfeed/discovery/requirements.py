"""
Requirement extraction - technology tags from free-text job content
"""

from typing import Optional

from .listing import MAX_REQUIREMENTS

TECH_KEYWORDS: tuple[str, ...] = (
    "Python", "Java", "TypeScript", "JavaScript", "React", "Node.js",
    "AWS", "GCP", "Azure", "Kubernetes", "Docker", "PostgreSQL",
    "MongoDB", "Redis", "Kafka", "GraphQL", "Machine Learning",
    "Deep Learning", "TensorFlow", "PyTorch", "Go", "Rust", "C++",
    "SQL", "NoSQL", "REST API", "Microservices", "CI/CD", "Terraform",
    "Linux", "Spark", "Airflow", "dbt", "Snowflake", "BigQuery",
    "Databricks", "MLOps",
)


def extract_requirements(
    content: Optional[str],
    vocabulary: tuple[str, ...] = TECH_KEYWORDS,
    limit: int = MAX_REQUIREMENTS,
) -> list[str]:
    """
    Return vocabulary entries found in ``content``.

    Matching is a case-insensitive substring test, so short tags like "Go"
    or "SQL" also hit inside longer words. Results keep vocabulary order
    and are truncated to ``limit``.
    """
    if not content:
        return []

    haystack = content.lower()
    found = [kw for kw in vocabulary if kw.lower() in haystack]
    return found[:limit]
