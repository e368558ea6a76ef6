"""OpenAI backend for scene description and image rendering."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from creative_director.domain.images import ImageRef
from creative_director.services.generation import ImageClient
from creative_director.services.prompts import SceneClient

# Closest size supported by the Images API for each aspect ratio.
_IMAGE_SIZES: dict[str, str] = {
    "1:1": "1024x1024",
    "4:5": "1024x1536",
    "9:16": "1024x1536",
    "16:9": "1536x1024",
}


@dataclass
class OpenAIStudioClient(SceneClient, ImageClient):
    """Studio backend backed by the Responses and Images APIs."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIStudioClient":
        """Create an OpenAI studio client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def describe(
        self,
        *,
        model: str,
        prompt: str,
        images: list[ImageRef],
        temperature: float | None,
    ) -> str:
        """Call the Responses API with the images attached as data URLs."""
        content: list[dict[str, str]] = [
            {"type": "input_image", "image_url": image.to_data_url()}
            for image in images
        ]
        content.append({"type": "input_text", "text": prompt})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "store": False,
        }
        if temperature is not None:
            request_payload["temperature"] = temperature

        response = await self.client.responses.create(**request_payload)
        return response.output_text or ""

    async def render(
        self,
        *,
        model: str,
        prompt: str,
        aspect_ratio: str,
        images: list[ImageRef],
    ) -> ImageRef | None:
        """Edit from the reference images when present, otherwise generate."""
        size = _IMAGE_SIZES.get(aspect_ratio, "auto")
        if images:
            uploads = [
                (f"reference-{index}.{_extension(image)}", image.data, image.mime_type)
                for index, image in enumerate(images)
            ]
            response = await self.client.images.edit(
                model=model, image=uploads, prompt=prompt, size=size
            )
        else:
            response = await self.client.images.generate(
                model=model, prompt=prompt, size=size
            )
        data = response.data or []
        if not data or not data[0].b64_json:
            return None
        return ImageRef.from_base64(data[0].b64_json, "image/png")


def _extension(image: ImageRef) -> str:
    return image.mime_type.split("/")[-1].replace("jpeg", "jpg")
