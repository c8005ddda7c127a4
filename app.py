import os

from merchstore import create_app

app = create_app()

if __name__ == "__main__":
    # Same port the storefront client expects in development
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3001")), debug=True)
