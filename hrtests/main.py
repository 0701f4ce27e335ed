from hrtests.app import create_app
from hrtests.config import get_settings

app = create_app()

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("hrtests.main:app", host=settings.host, port=settings.port, reload=True)
