"""
PRBuild: dev server launcher
Run with: python -m prbuild.run
"""
import uvicorn

from prbuild import config

if __name__ == "__main__":
    uvicorn.run(
        "prbuild.main:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=True,
        reload_dirs=["prbuild"],
    )
