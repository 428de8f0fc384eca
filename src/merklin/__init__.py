import uvicorn

from fastapi import FastAPI, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from merkle_tree import CapacityExceeded, MerkleTree, VerificationFailure
from . import config

import asyncio
import logging

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class TreeState:
    tree: MerkleTree
    # the tree itself is not safe for concurrent callers
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.tree_state = TreeState(MerkleTree(max_entries=config.max_entries()))
    logger.info(
        f"Merkle tree initialized, capacity {app.state.tree_state.tree.max_entries}"
    )
    yield
    logger.info("Shutting down application")
    app.state.tree_state.tree.clear()
    logger.info("Application shutdown complete")


app = FastAPI(lifespan=lifespan)


class EntryBody(BaseModel):
    entry: str


def get_state(request: Request) -> TreeState:
    return request.app.state.tree_state


@app.exception_handler(CapacityExceeded)
async def capacity_exceeded_handler(
    request: Request, exc: CapacityExceeded
) -> JSONResponse:
    leaves = get_state(request).tree.leaves()
    logger.warning(f"Append rejected on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=507,
        content={
            "type": "error",
            "error": str(exc),
            "max_entries": exc.max_entries,
            "leaves": leaves,
        },
    )


@app.exception_handler(VerificationFailure)
async def verification_failure_handler(
    request: Request, exc: VerificationFailure
) -> JSONResponse:
    logger.error(f"Tampering detected on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=409,
        content={"type": "error", "error": str(exc), "key": exc.key, "path": exc.path},
    )


@app.get("/tree")
async def get_tree(
    include_root: bool = False, state: TreeState = Depends(get_state)
) -> dict[str, Any]:
    async with state.lock:
        return state.tree.to_dict(include_root=include_root)


@app.delete("/tree")
async def clear_tree(state: TreeState = Depends(get_state)) -> dict[str, Any]:
    async with state.lock:
        state.tree.clear()
        return state.tree.to_dict()


@app.post("/entries", status_code=201)
async def add_entry(
    body: EntryBody, state: TreeState = Depends(get_state)
) -> dict[str, str]:
    async with state.lock:
        key = state.tree.append(body.entry)
    logger.debug(f"Entry stored under {key}")
    return {"key": key}


@app.post("/entries/random", status_code=201)
async def add_random_entries(
    count: int = Query(ge=1), state: TreeState = Depends(get_state)
) -> dict[str, list[str]]:
    async with state.lock:
        keys = state.tree.load_random_entries(count)
    logger.info(f"Loaded {len(keys)} random entries")
    return {"keys": keys}


@app.get("/entries/{key}")
async def get_entry(key: str, state: TreeState = Depends(get_state)) -> dict[str, str]:
    async with state.lock:
        leaf = state.tree.get(key)
    if leaf is None:
        raise HTTPException(status_code=404, detail=f"no entry for key {key}")
    return leaf.to_dict()


@app.post("/entries/{key}/verify")
async def verify_entry(
    key: str, body: EntryBody, state: TreeState = Depends(get_state)
) -> dict[str, bool]:
    async with state.lock:
        state.tree.verify(key, body.entry)
    return {"verified": True}


@app.post("/verify")
async def verify_tree(state: TreeState = Depends(get_state)) -> dict[str, bool]:
    async with state.lock:
        state.tree.verify()
    return {"verified": True}


def main():
    config.validate_config()
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Starting Merklin server on {config.HOST}:{config.port()}")
    uvicorn.run(app, host=config.HOST, port=config.port())
