from filestore.main import run

run()
