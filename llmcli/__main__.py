"""
Use large language models from your terminal.

$ llm [options] <prompt>
$ llm ls

Examples:
$ llm "Write a haiku about tea"
$ llm -m bing-precise "What is the boiling point of water at 2000m?"
$ python -m llmcli -m gpt2 "The meaning of life is"
"""

import llmcli._cli

if __name__ == "__main__":
    llmcli._cli.main()
