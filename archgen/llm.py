"""
LLM Integration for archgen.

This module provides optional AI-powered text for the architecture
document: a short project description and a technical stack summary.

Environment Variables:
    - OPENAI_API_KEY: API key for OpenAI (used when no key is passed)

Note: AI features are optional and best-effort. Every call has a local
fallback, and nothing produced here feeds back into the tree or graph.
"""

import json
import os
from typing import Iterable, Optional

from archgen.schema import Project, namespace_prefix

DEFAULT_MODEL = "gpt-4o"
DEFAULT_DESCRIPTION = "A monorepo project managed with pnpm workspaces."
EXTERNAL_DEPENDENCY_LIMIT = 500

DESCRIPTION_SYSTEM_PROMPT = (
    "You are a technical writer who specializes in creating concise project "
    "descriptions. Generate a clear, technical description in 2-3 sentences "
    "based on the provided README and package.json contents. Focus on the "
    "project's main purpose, key features, and technical stack."
)

TECH_STACK_SYSTEM_PROMPT = """You are a technical writer who specializes in creating concise project descriptions.
Generate a clear, technical description of tech stack in bullet points that will be displayed in markdown.
Don't include all external packages but the most important ones
Use following template:
- **External Package 1 name**: description
- **External Package 2 name**: description"""


class LLMProvider:
    """
    Abstract interface for LLM providers.

    This allows swapping backends (or a fake in tests) while keeping one
    interface for the enhancer.
    """

    def is_available(self) -> bool:
        return False

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 300,
    ) -> Optional[str]:
        """
        Generate text from a prompt.

        Args:
            prompt: The user prompt
            system: Optional system instructions
            max_tokens: Maximum tokens in response

        Returns:
            Generated text, or None if generation failed
        """
        raise NotImplementedError


class OpenAIProvider(LLMProvider):
    """OpenAI API provider."""

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = model
        self.client = None

        if self.api_key:
            try:
                from openai import OpenAI
                self.client = OpenAI(api_key=self.api_key)
            except ImportError:
                pass

    def is_available(self) -> bool:
        """Check if OpenAI is available."""
        return self.client is not None

    def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 300,
    ) -> Optional[str]:
        """Generate text using OpenAI."""
        if not self.client:
            return None

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=0.7,
                messages=messages,
            )
            return response.choices[0].message.content
        except Exception as e:
            print(f"OpenAI API error: {e}")
            return None


def external_dependencies(
    projects: Iterable[Project],
    limit: int = EXTERNAL_DEPENDENCY_LIMIT,
) -> list[str]:
    """
    List dependency names that do not belong to the workspace.

    A name is internal when its namespace prefix matches the prefix of any
    workspace project. Names are deduplicated in first-seen order and the
    list is capped at ``limit``.
    """
    projects = list(projects)
    internal_prefixes = {p.namespace_prefix for p in projects}

    names: dict[str, None] = {}
    for project in projects:
        for dependency in project.dependencies + project.dev_dependencies:
            if namespace_prefix(dependency) not in internal_prefixes:
                names.setdefault(dependency, None)

    return list(names)[:limit]


class ArchitectureEnhancer:
    """
    Produces AI-written text for the architecture document.

    Usage:
        enhancer = get_llm_enhancer(api_key)
        description = enhancer.describe_project(readme, package_json)
        stack = enhancer.describe_tech_stack(projects)
    """

    def __init__(self, provider: Optional[LLMProvider] = None):
        self.provider = provider if provider is not None else OpenAIProvider()

    def is_available(self) -> bool:
        """Check if an LLM provider is ready."""
        return self.provider is not None and self.provider.is_available()

    def describe_project(
        self,
        readme_contents: Optional[str],
        package_json_contents: str,
    ) -> str:
        """
        Write a 2-3 sentence project description.

        Falls back to the package.json description, then to a generic
        sentence, when the model is unavailable or returns nothing.

        Args:
            readme_contents: Root README text (may be empty)
            package_json_contents: Root package.json as a JSON string
        """
        prompt = f"""Please generate a short description for this project based on the following information:
README contents:
{readme_contents or ""}

package.json contents:
{package_json_contents}

Remember to keep it technical and concise (2-3 sentences only)."""

        description = None
        if self.is_available():
            description = self.provider.generate(
                prompt, system=DESCRIPTION_SYSTEM_PROMPT, max_tokens=200
            )

        if description and description.strip():
            return description.strip()

        print("Failed to generate AI description, using package.json description")
        return _fallback_description(package_json_contents)

    def describe_tech_stack(self, projects: Iterable[Project]) -> str:
        """
        Write a bullet list describing the most important external packages.

        Returns:
            Markdown bullet list, or "" when generation fails
        """
        projects = list(projects)
        internal = "\n".join(p.name for p in projects)
        external = "\n".join(external_dependencies(projects))

        prompt = f"""Generate a tech stack description. Directly reference only external packages.
You can use internal ones to get project architecture:

Internal packages:
{internal}

External packages:
{external}
"""

        if not self.is_available():
            return ""

        text = self.provider.generate(prompt, system=TECH_STACK_SYSTEM_PROMPT, max_tokens=300)
        return text.strip() if text else ""


def _fallback_description(package_json_contents: str) -> str:
    try:
        package_json = json.loads(package_json_contents)
    except (TypeError, json.JSONDecodeError):
        return DEFAULT_DESCRIPTION

    if isinstance(package_json, dict) and isinstance(package_json.get("description"), str):
        if package_json["description"].strip():
            return package_json["description"]
    return DEFAULT_DESCRIPTION


def get_llm_enhancer(api_key: Optional[str] = None) -> ArchitectureEnhancer:
    """
    Get a configured enhancer.

    Returns:
        ArchitectureEnhancer (may not have an active provider)
    """
    return ArchitectureEnhancer(OpenAIProvider(api_key=api_key))
