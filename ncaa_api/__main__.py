"""Run the API server: python -m ncaa_api"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "ncaa_api.api.app:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 3000)),
        log_config=None,
    )


if __name__ == "__main__":
    main()
