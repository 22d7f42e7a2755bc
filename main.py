import uvicorn
from portal.main import app  # noqa: F401

if __name__ == "__main__":
    uvicorn.run(
        "portal.main:app",
        host="0.0.0.0",
        port=8002,
        reload=True,
        workers=1,
    )
