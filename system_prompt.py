STYLE_TRANSFER_PROMPT = """\
You will be given two images. The first image is the **content source**. The second image is the **style reference**.
Your task is to generate a new image that combines the content of the first image with the artistic style, color palette, and texture of the second image.
Do not mix the content of the images; only transfer the style.
"""
