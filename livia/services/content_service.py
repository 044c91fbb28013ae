"""
Content Service Module

Fetches the astronomy content served by the Livia GraphQL endpoint: picture
of the day, natural-disaster events, planets, articles and server status.
"""

import asyncio
from typing import Dict, Any, List, Optional

import httpx

from .graphql_client import GraphQLClient
from . import queries
from ..core.exceptions import GraphQLError
from ..core.logging import logger


class ContentService:
    def __init__(self, graphql_client: GraphQLClient):
        self.graphql_client = graphql_client

    async def server_status(self) -> Dict[str, Any]:
        return await self.graphql_client.execute(queries.SERVER_STATUS, request_id="content_status")

    async def picture(self, date: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Picture of the day, for `date` (YYYY-MM-DD) or today."""
        variables = {"date": date} if date else None
        data = await self.graphql_client.execute(queries.PICTURE, variables, request_id="content_picture")
        return data.get("picture")

    async def events(self, days: Optional[int] = None) -> List[Dict[str, Any]]:
        variables = {"daysInput": days} if days is not None else None
        data = await self.graphql_client.execute(queries.EVENTS, variables, request_id="content_events")
        return data.get("events") or []

    async def planets(self) -> List[Dict[str, Any]]:
        data = await self.graphql_client.execute(queries.PLANETS, request_id="content_planets")
        return data.get("planets") or []

    async def articles(self) -> List[Dict[str, Any]]:
        data = await self.graphql_client.execute(queries.ARTICLES, request_id="content_articles")
        return data.get("articles") or []

    async def fetch_all(self) -> Dict[str, Any]:
        """
        Fetch picture, articles, events and planets concurrently.

        A failing section does not fail the others: it is left empty and its
        error message is reported under "errors". "network_error" is set only
        when every section came back empty.
        """
        with logger.request_context("Content fetch_all", request_id="content_all", component="content_service"):
            results = await asyncio.gather(
                self.picture(),
                self.articles(),
                self.events(),
                self.planets(),
                return_exceptions=True
            )

        sections = ["picture", "articles", "events", "planets"]
        content: Dict[str, Any] = {"picture": None, "articles": [], "events": [], "planets": []}
        errors: Dict[str, str] = {}

        for section, result in zip(sections, results):
            if isinstance(result, (GraphQLError, httpx.RequestError)):
                errors[section] = str(result) or type(result).__name__
                logger.warning(f"{section} fetch failed: {errors[section]}", component="content_service")
            elif isinstance(result, BaseException):
                raise result
            else:
                content[section] = result

        content["errors"] = errors
        content["network_error"] = (
            content["picture"] is None
            and not content["articles"]
            and not content["events"]
            and not content["planets"]
        )
        return content
