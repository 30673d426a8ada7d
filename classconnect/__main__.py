from classconnect.main import run

run()
