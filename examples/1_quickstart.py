import asyncio

from llmcli import AppContext, BufferSink, resolve_request, use_llm

# llmcli reads credentials from the environment. Run `export OPENAI_API_KEY="sk-..."` in your terminal before running
# this example.
ctx = AppContext()


async def main():
    # A request is the same thing the `llm` command builds from its arguments. The model decides which backend is used.
    request = resolve_request("Write a haiku about tea", model="gpt-3.5-turbo", temperature=0.7)

    # Engines write to a sink as they go. A BufferSink keeps everything in memory instead of printing it.
    sink = BufferSink()
    try:
        completion = await use_llm(request, ctx, sink)
    finally:
        await ctx.close()
    print(completion)


if __name__ == "__main__":
    asyncio.run(main())
