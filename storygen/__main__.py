"""개발 서버 실행 — ``python -m storygen``.

Run the API with uvicorn on HOST:PORT from settings.
"""

import logging

import uvicorn

from storygen.config import settings

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("storygen.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
