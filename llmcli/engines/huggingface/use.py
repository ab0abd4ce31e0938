"""
Generate a completion with a HuggingFace text-generation model and print it to stdout.

This is the script run by the HuggingFaceEngine:
python use.py --model gpt2 --prompt "Once upon a time"

Any text-generation model from huggingface.co/models can be used. Models are downloaded on first use.
"""

import argparse
import sys


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Complete a prompt with a HuggingFace model.")
    parser.add_argument("--model", required=True, help="the model ID on the HuggingFace hub (e.g. gpt2)")
    parser.add_argument("--prompt", required=True, help="the text to complete")
    parser.add_argument("--max-new-tokens", type=int, default=256, help="maximum number of tokens to generate")
    return parser.parse_args(argv)


def generate(model: str, prompt: str, max_new_tokens: int = 256) -> str:
    from transformers import pipeline

    generator = pipeline("text-generation", model=model)
    outputs = generator(prompt, max_new_tokens=max_new_tokens, return_full_text=False)
    return outputs[0]["generated_text"]


def main(argv=None):
    args = parse_args(argv)
    try:
        completion = generate(args.model, args.prompt, args.max_new_tokens)
    except ImportError:
        sys.exit(
            'This script requires extra dependencies. Please install llmcli with "pip install llmcli[huggingface]".'
        )
    print(completion)


if __name__ == "__main__":
    main()
