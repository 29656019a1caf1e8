from typing import Any, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from config import Settings, get_settings
from database import StorageError, connect, get_database, store_message
from logging_config import LoggingConfig
from posts import InvalidPost, PostNotFound, PostRepository, RevalidatingPosts
from schemas import ContactResponse, ErrorResponse, Message, Post, PostList, SlugList
from validation import MessageValidationError, validate_message

logger = LoggingConfig.get_logger(__name__)

INVALID_INPUT = "Invalid input."


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    LoggingConfig.configure(settings)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.posts = RevalidatingPosts(
        PostRepository(settings.posts_dir),
        revalidate_seconds=settings.posts_revalidate_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------
    # Error mapping
    # -----------------
    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"message": INVALID_INPUT})

    @app.exception_handler(PostNotFound)
    async def post_not_found(request: Request, exc: PostNotFound):
        return JSONResponse(status_code=404, content={"message": "Post not found."})

    @app.exception_handler(InvalidPost)
    async def invalid_post(request: Request, exc: InvalidPost):
        logger.error("Could not load post %s: %s", exc.slug, exc.reason)
        return JSONResponse(status_code=500, content={"message": "Could not load posts."})

    # -----------------
    # Basic routes
    # -----------------
    @app.get("/")
    def read_root():
        return {"message": f"{settings.app_name} running"}

    @app.get("/test")
    def test_database():
        response = {
            "backend": "running",
            "database": "not connected",
            "posts_dir": str(settings.posts_dir),
            "collections": [],
        }
        try:
            client = connect(settings.mongo_uri, settings.mongo_timeout_ms)
        except StorageError as e:
            response["database"] = e.reason
            return response
        try:
            response["collections"] = get_database(client, settings.mongo_database).list_collection_names()
            response["database"] = "connected"
        except PyMongoError as e:
            response["database"] = f"connected but error: {str(e)[:80]}"
        finally:
            client.close()
        return response

    # -----------------
    # Contact
    # -----------------
    @app.post(
        "/api/contact",
        status_code=201,
        response_model=ContactResponse,
        responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def contact(payload: Any = Body(None)):
        if not isinstance(payload, dict):
            return JSONResponse(status_code=422, content={"message": INVALID_INPUT})
        email, name, message = payload.get("email"), payload.get("name"), payload.get("message")
        try:
            validate_message(name, email, message)
        except MessageValidationError as e:
            logger.debug("Rejected contact message: %s", e.kind.value)
            return JSONResponse(status_code=422, content={"message": INVALID_INPUT})

        new_message = Message(email=email, name=name, message=message)

        try:
            client = connect(settings.mongo_uri, settings.mongo_timeout_ms)
        except StorageError as e:
            return JSONResponse(status_code=500, content={"message": e.reason})

        try:
            stored = store_message(
                client,
                new_message,
                database=settings.mongo_database,
                collection=settings.messages_collection,
            )
        except StorageError as e:
            return JSONResponse(status_code=500, content={"message": e.reason})
        finally:
            client.close()

        return ContactResponse(message="Successfully stored message!", outgoingMessage=stored)

    # -----------------
    # Posts
    # -----------------
    @app.get("/api/posts", response_model=PostList)
    def list_posts():
        return PostList(items=app.state.posts.all())

    @app.get("/api/posts/featured", response_model=PostList)
    def featured_posts():
        return PostList(items=app.state.posts.featured())

    @app.get("/api/posts/slugs", response_model=SlugList)
    def post_slugs():
        return SlugList(items=app.state.posts.slugs())

    @app.get("/api/posts/{slug}", response_model=Post)
    def get_post(slug: str):
        return app.state.posts.get(slug)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
