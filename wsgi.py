from quillpress import create_app

app = create_app()
