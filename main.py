import logging
import os
from typing import Annotated

from rich.logging import RichHandler

from sigcli import Application, Alias, Description, Option, PrettyName

app = Application(descr="This is the root level command description.", version="0.0.0")


@app.command
@Description("This is the description of my-command")
def myCommand(
        firstArgument: Annotated[str, Description("The first argument.")],
        secondArgument: Annotated[str, Description("The second argument, but this one is optional.")] = "default!",
        optionOne: Annotated[str, Option(), Alias("-o1"), PrettyName("Option 1 Pretty Name")] = "1",
        optionTwo: Annotated[str, Option(), Alias("-o2"), Alias("-2"), PrettyName("Option 2 Pretty Name")] = "2",
        skipConfirmations: Annotated[bool, Option(), Alias("-y"), Description("Skips confirmations.")] = False,
):
    print(f"firstArgument = {firstArgument}")
    print(f"secondArgument = {secondArgument}")
    print(f"optionOne = {optionOne}")
    print(f"optionTwo = {optionTwo}")
    print(f"skipConfirmations = {skipConfirmations}")


if __name__ == '__main__':
    if os.environ.get("SIGCLI_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler()])
    app.run()
