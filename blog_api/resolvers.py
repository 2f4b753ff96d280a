"""Query and Mutation resolvers bound to the Supabase `posts` table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ariadne import MutationType, QueryType, make_executable_schema
from graphql import GraphQLSchema

from .errors import AuthenticationRequired, DataStoreError, EmptyUpdate
from .schema import type_defs
from .store import StoreClient
from .trophies import TrophyClient

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"
UPDATABLE_FIELDS = ("title", "content", "author")

StoreFactory = Callable[[Optional[str]], StoreClient]


@dataclass(frozen=True)
class PostIdArgs:
    id: str


@dataclass(frozen=True)
class CreatePostArgs:
    title: str
    content: str
    author: Optional[str] = None

    def row(self) -> dict[str, Any]:
        row = {"title": self.title, "content": self.content}
        if self.author is not None:
            row["author"] = self.author
        return row


@dataclass(frozen=True)
class UpdatePostArgs:
    id: str
    changes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_kwargs(cls, kwargs: dict[str, Any]) -> "UpdatePostArgs":
        # omitted arguments are absent from kwargs; an explicit null arrives as None
        changes = {name: kwargs[name] for name in UPDATABLE_FIELDS if name in kwargs}
        return cls(id=kwargs["id"], changes=changes)


@dataclass(frozen=True)
class TrophiesArgs:
    username: str


def _require_token(info, action: str) -> str:
    token = info.context.auth_token
    if not token:
        raise AuthenticationRequired(action)
    return token


def build_resolvers(store_factory: StoreFactory, trophy_client: TrophyClient) -> list:
    query = QueryType()
    mutation = MutationType()

    def posts_table(token: Optional[str]):
        return store_factory(token).table(POSTS_TABLE)

    @query.field("posts")
    def resolve_posts(_, info):
        return posts_table(info.context.auth_token).select("*").unwrap()

    @query.field("post")
    def resolve_post(_, info, **kwargs):
        args = PostIdArgs(**kwargs)
        return posts_table(info.context.auth_token).select("*", {"id": args.id}, single=True).unwrap()

    @query.field("trophies")
    def resolve_trophies(_, info, **kwargs):
        args = TrophiesArgs(**kwargs)
        return trophy_client.fetch(args.username)

    @mutation.field("createPost")
    def resolve_create_post(_, info, **kwargs):
        args = CreatePostArgs(**kwargs)
        token = _require_token(info, "create posts")
        return posts_table(token).insert([args.row()], single=True).unwrap()

    @mutation.field("updatePost")
    def resolve_update_post(_, info, **kwargs):
        args = UpdatePostArgs.from_kwargs(kwargs)
        token = _require_token(info, "update posts")
        if not args.changes:
            raise EmptyUpdate()
        logger.info(f"Updating post with id: {args.id}, fields: {sorted(args.changes)}")

        result = posts_table(token).update(args.changes, {"id": args.id}, single=True)
        if result.error is not None:
            logger.error(f"Error updating post {args.id}: {result.error.message}")
            raise DataStoreError("Failed to update post")

        logger.info(f"Update successful: post {args.id}")
        return result.data

    @mutation.field("deletePost")
    def resolve_delete_post(_, info, **kwargs):
        args = PostIdArgs(**kwargs)
        token = _require_token(info, "delete posts")
        return posts_table(token).delete({"id": args.id}, single=True).unwrap()

    return [query, mutation]


def build_schema(store_factory: StoreFactory, trophy_client: TrophyClient) -> GraphQLSchema:
    return make_executable_schema(type_defs, build_resolvers(store_factory, trophy_client))
