from pglaunch.cli import entrypoint

entrypoint()
