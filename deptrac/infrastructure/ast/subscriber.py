"""Keeps the file cache in sync with AST map creation."""

from typing import Dict, Tuple, Union

from deptrac.infrastructure.ast.cache import AstFileReferenceFileCache
from deptrac.infrastructure.ast.events import PostCreateAstMapEvent, PreCreateAstMapEvent
from deptrac.infrastructure.event.dispatcher import event_name


class CacheableFileSubscriber:
    """Loads the cache before the AST map is built and writes it afterwards."""

    def __init__(self, cache: AstFileReferenceFileCache):
        self.cache = cache

    @staticmethod
    def get_subscribed_events() -> Dict[str, Union[str, Tuple[str, int]]]:
        return {
            event_name(PreCreateAstMapEvent): "on_pre_create_ast_map_event",
            event_name(PostCreateAstMapEvent): "on_post_create_ast_map_event",
        }

    def on_pre_create_ast_map_event(self, event: PreCreateAstMapEvent) -> None:
        self.cache.load()

    def on_post_create_ast_map_event(self, event: PostCreateAstMapEvent) -> None:
        self.cache.write()
