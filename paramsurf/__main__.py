"""Run the development server: ``python -m paramsurf``."""

import uvicorn

from paramsurf.config import SERVER_HOST, SERVER_PORT

if __name__ == "__main__":
    uvicorn.run("paramsurf.main:app", host=SERVER_HOST, port=SERVER_PORT)
