"""Let the dev agent poke around the working directory and write a README.

The agent is stateful, so the second request can refer to the file written
by the first one without restating it.
"""

from naive_agent.api.service import run_request

if __name__ == "__main__":
    question = (
        "Analyze each top-level directory in the current working directory. "
        "Make a new file named README.md which describes each under the "
        "heading 'Project layout'."
    )
    print("User:", question)
    print("Agent:", run_request(question))
    print()

    follow_up = "Append a short thank you note to the bottom of that file."
    print("User:", follow_up)
    print("Agent:", run_request(follow_up))
