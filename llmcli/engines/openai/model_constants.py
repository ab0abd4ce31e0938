# https://platform.openai.com/docs/models
# models served by the legacy /completions endpoint
COMPLETION_MODELS = frozenset(
    {
        "gpt-3.5-turbo-instruct",
        "babbage-002",
        "davinci-002",
        # retired, but still routed here so that the API's error message is shown
        "text-davinci-003",
        "text-davinci-002",
        "text-curie-001",
        "text-babbage-001",
        "text-ada-001",
    }
)

# models served by /chat/completions
CHAT_MODELS = frozenset(
    {
        "gpt-3.5-turbo",
        "gpt-3.5-turbo-16k",
        "gpt-4",
        "gpt-4-32k",
        "gpt-4-turbo",
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4.1-nano",
    }
)

# generation can take a long time for big max_tokens, so we wait up to an hour rather than failing fast
REQUEST_TIMEOUT = 60 * 60
