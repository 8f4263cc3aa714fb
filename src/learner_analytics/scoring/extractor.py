"""Keyword-based extraction of skills, technologies and topics from problem tags."""

from pydantic import BaseModel, Field

# (keywords, name, category)
SKILL_KEYWORDS: list[tuple[frozenset[str], str, str]] = [
    (frozenset({"javascript", "js", "typescript", "ts"}), "JavaScript", "programming-language"),
    (frozenset({"python"}), "Python", "programming-language"),
    (frozenset({"java"}), "Java", "programming-language"),
]

TECH_KEYWORDS: list[tuple[frozenset[str], str, str]] = [
    (frozenset({"react"}), "React", "framework"),
    (frozenset({"nodejs", "node"}), "Node.js", "runtime"),
    (frozenset({"express"}), "Express.js", "framework"),
    (frozenset({"mongodb", "mongo"}), "MongoDB", "database"),
    (frozenset({"postgresql", "postgres"}), "PostgreSQL", "database"),
    (frozenset({"mysql"}), "MySQL", "database"),
    (frozenset({"redis"}), "Redis", "database"),
    (frozenset({"aws"}), "AWS", "cloud"),
    (frozenset({"docker"}), "Docker", "devops"),
    (frozenset({"kubernetes", "k8s"}), "Kubernetes", "devops"),
    (frozenset({"terraform"}), "Terraform", "devops"),
]

# (keyword, matches category as well as tags, name, category)
TOPIC_KEYWORDS: list[tuple[str, bool, str, str]] = [
    ("algorithms", True, "Algorithms", "cs-fundamentals"),
    ("system-design", True, "System Design", "architecture"),
    ("dynamic-programming", False, "Dynamic Programming", "algorithms"),
]


class ExtractedSkill(BaseModel):
    skill: str
    category: str


class ExtractedTech(BaseModel):
    technology: str
    category: str


class ExtractedTopic(BaseModel):
    topic: str
    category: str


class ExtractedSkills(BaseModel):
    skills: list[ExtractedSkill] = Field(default_factory=list)
    tech: list[ExtractedTech] = Field(default_factory=list)
    topics: list[ExtractedTopic] = Field(default_factory=list)


def extract_skills(category: str | None, tags: list[str] | None) -> ExtractedSkills:
    """Map a problem's category and tags onto recognized skills.

    Matching is exact and case-insensitive. Output order follows the keyword
    tables, so the result does not depend on tag order. Unrecognized tags are
    ignored.

    Args:
        category: Problem category, e.g. "algorithms".
        tags: Problem tags, e.g. ["python", "docker"].

    Returns:
        ExtractedSkills with each recognized item listed once.
    """
    tag_set = {(t or "").lower() for t in tags or []}
    cat = (category or "").lower()

    result = ExtractedSkills()
    for keywords, name, label in SKILL_KEYWORDS:
        if tag_set & keywords:
            result.skills.append(ExtractedSkill(skill=name, category=label))
    for keywords, name, label in TECH_KEYWORDS:
        if tag_set & keywords:
            result.tech.append(ExtractedTech(technology=name, category=label))
    for keyword, match_category, name, label in TOPIC_KEYWORDS:
        if keyword in tag_set or (match_category and cat == keyword):
            result.topics.append(ExtractedTopic(topic=name, category=label))
    return result
