"""Synchronous research-to-article automation with in-memory bookkeeping."""

from __future__ import annotations

import logging

from contentflow.core.exceptions import ArticleNotFoundError, RequestNotFoundError
from contentflow.core.ids import new_request_id
from contentflow.schemas.automation import ContentRequest, RequestStatus
from contentflow.schemas.content import Article, InputKind
from contentflow.schemas.generation import GenerationOptions
from contentflow.schemas.research import ResearchData
from contentflow.services.content_generator import ContentGenerator, get_content_generator
from contentflow.services.content_templates import topic_from_url
from contentflow.services.research_extraction import build_research_data
from contentflow.services.research_provider import ResearchProvider, get_research_provider
from contentflow.services.seo_scorer import analyze_content, readability_score

logger = logging.getLogger(__name__)


def research_query_for(request: ContentRequest) -> str:
    """Research query for a request; URL inputs search the derived topic plus the URL."""
    if request.type == "url":
        topic = topic_from_url(request.input)
        return f"{topic} {request.input} latest information trends statistics"
    return request.input


class AutomationEngine:
    """Run research, generation, and SEO analysis for one request at a time."""

    def __init__(
        self,
        provider: ResearchProvider | None = None,
        generator: ContentGenerator | None = None,
    ) -> None:
        self.provider = provider if provider is not None else get_research_provider()
        self.generator = generator if generator is not None else get_content_generator()
        self._requests: dict[str, ContentRequest] = {}
        self._articles: dict[str, Article] = {}

    def _set_status(self, request_id: str, status: RequestStatus) -> ContentRequest:
        request = self._requests[request_id].model_copy(update={"status": status})
        self._requests[request_id] = request
        logger.info(
            "Automation request status changed",
            extra={"request_id": request_id, "status": status},
        )
        return request

    async def process_request(
        self,
        input_value: str,
        kind: InputKind,
        options: GenerationOptions | None = None,
    ) -> str:
        """Process a request end to end and return the new article id.

        Errors mark the request as `error` and propagate.
        """
        options = options or GenerationOptions()
        request = ContentRequest(
            id=new_request_id(),
            type=kind,
            input=input_value,
            target_keywords=list(options.target_keywords),
            word_count=options.word_count,
            tone=options.tone,
        )
        self._requests[request.id] = request

        try:
            request = self._set_status(request.id, "researching")
            research = await self.conduct_research(request)

            request = self._set_status(request.id, "generating")
            article = await self.generator.generate_article(request, research)
            analysis = analyze_content(article.content, article.keywords)
            article = article.model_copy(
                update={
                    "seo_score": analysis.score,
                    "readability_score": readability_score(article.content),
                    "meta_description": article.meta_description or analysis.meta_description,
                }
            )
        except Exception:
            self._set_status(request.id, "error")
            raise

        self._articles[article.id] = article
        self._set_status(request.id, "completed")
        logger.info(
            "Automation request completed",
            extra={
                "request_id": request.id,
                "article_id": article.id,
                "seo_score": article.seo_score,
                "word_count": article.word_count,
            },
        )
        return article.id

    async def conduct_research(self, request: ContentRequest) -> ResearchData:
        result = await self.provider.research(research_query_for(request))
        return build_research_data(result)

    def get_request(self, request_id: str) -> ContentRequest:
        request = self._requests.get(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    def get_article(self, article_id: str) -> Article:
        article = self._articles.get(article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)
        return article

    def list_requests(self) -> list[ContentRequest]:
        return list(self._requests.values())

    def list_articles(self) -> list[Article]:
        return list(self._articles.values())


_automation_engine: AutomationEngine | None = None


def get_automation_engine() -> AutomationEngine:
    """Get singleton automation engine."""
    global _automation_engine
    if _automation_engine is None:
        _automation_engine = AutomationEngine()
    return _automation_engine
