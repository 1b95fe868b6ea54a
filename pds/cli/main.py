"""Main CLI application using Cyclopts."""

import cyclopts

from pds.cli.commands import db, jobs

app = cyclopts.App(
    name="pds",
    help="Deposit status reconciliation services",
)

app.command(jobs.app, name="jobs")
app.command(db.app, name="db")


if __name__ == "__main__":
    app()
