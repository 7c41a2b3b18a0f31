"""
Topic tagging for CodeWire.
"""
from typing import Dict, List, Optional

MAX_TAGS = 3

# Declaration order is the output order
TAG_KEYWORDS = {
    'javascript': ['javascript', 'js', 'node', 'npm', 'v8', 'bun'],
    'python': ['python', 'pip', 'django', 'flask', 'pytorch'],
    'ai/ml': ['ai', 'llm', 'gpt', 'claude', 'gemini', 'machine learning', 'openai', 'anthropic'],
    'rust': ['rust', 'cargo'],
    'typescript': ['typescript'],
    'react': ['react', 'nextjs', 'next.js', 'jsx'],
    'go': ['golang', 'go '],
    'docker': ['docker', 'container', 'kubernetes', 'k8s'],
    'security': ['security', 'vulnerability', 'exploit', 'cve'],
    'cloud': ['aws', 'azure', 'gcp', 'serverless'],
    'open source': ['open source', 'opensource', 'github'],
    'web': ['web', 'browser', 'css', 'html', 'frontend', 'backend'],
}

TAG_NAMES = list(TAG_KEYWORDS)

class TagClassifier:
    """
    Rule-based topic tagger using plain keyword containment.

    There is no weighting or stemming: a topic is included when any of its
    keywords occurs as a substring of the lower-cased text, and topics are
    reported in table order, not by relevance.
    """
    def __init__(self, keywords: Optional[Dict[str, List[str]]] = None, max_tags: int = MAX_TAGS):
        self.keywords = keywords if keywords is not None else TAG_KEYWORDS
        self.max_tags = max_tags

    def classify(self, text: Optional[str]) -> List[str]:
        """
        Map text to at most ``max_tags`` topic labels.

        Args:
            text: Free text, usually an article title

        Returns:
            Matching topic labels in table order
        """
        lowered = (text or "").lower()
        if not lowered:
            return []

        tags = []
        for tag, keywords in self.keywords.items():
            if any(keyword in lowered for keyword in keywords):
                tags.append(tag)
                if len(tags) >= self.max_tags:
                    break
        return tags


_default_classifier = TagClassifier()

def extract_tags(text: Optional[str]) -> List[str]:
    """Classify text with the default keyword table."""
    return _default_classifier.classify(text)
