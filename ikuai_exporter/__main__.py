from ikuai_exporter.cli import run

run()
