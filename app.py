import asyncio
import logging
import os
import threading

from dotenv import load_dotenv
from flask import Flask, request, jsonify

from app_state import ROLES
from studio import Studio

logger = logging.getLogger(__name__)


class LoopRunner:
    """One asyncio loop on a daemon thread; every state change runs there."""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever, name="studio-loop", daemon=True)
        self._thread.start()

    def run(self, coro, timeout=None):
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def call(self, fn, *args):
        async def _call():
            return fn(*args)
        return self.run(_call())

    def stop(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join()


class WebView:
    """Keeps the last render and the warnings not yet shown by the page."""

    def __init__(self):
        self.last = None
        self.warnings = []

    def render(self, instructions):
        self.last = instructions

    def warn(self, message):
        self.warnings.append(message)

    def drain_warnings(self):
        warnings, self.warnings = self.warnings, []
        return warnings


def create_app(studio=None, runner=None):
    runner = runner or LoopRunner()
    if studio is None:
        studio = runner.call(Studio.from_env, WebView())

    app = Flask(__name__)
    app.extensions["studio"] = studio
    app.extensions["studio_loop"] = runner

    def envelope():
        return {
            "view": studio.instructions().to_dict(),
            "warnings": studio.view.drain_warnings(),
        }

    @app.route("/")
    def index():
        return HTML_PAGE

    @app.route("/api/state")
    def state():
        return jsonify(runner.call(envelope))

    @app.route("/api/images/<role>", methods=["POST"])
    def upload_image(role):
        if role not in ROLES:
            return jsonify({"error": f"Unknown role: {role}"}), 400

        file = request.files.get("file")
        if file is None:
            return jsonify({"error": "No file provided"}), 400

        async def accept():
            await studio.accept_file(file, role)
            return envelope()

        return jsonify(runner.run(accept()))

    @app.route("/api/generate", methods=["POST"])
    def generate():
        def trigger():
            started = studio.trigger_generate()
            return started, envelope()

        started, body = runner.call(trigger)
        return jsonify(body), 202 if started else 409

    return app


HTML_PAGE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Style Studio</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: #0f0f0f;
    color: #e0e0e0;
    min-height: 100vh;
    padding: 32px;
  }

  h1 { font-size: 1.1rem; font-weight: 600; color: #fff; margin-bottom: 24px; }

  .layout { display: grid; grid-template-columns: 1fr 1fr 1.4fr; gap: 20px; }

  .upload-area, .result-area {
    border: 1px dashed #2a2a2a;
    border-radius: 10px;
    background: #1a1a1a;
    min-height: 280px;
    display: flex;
    align-items: center;
    justify-content: center;
    position: relative;
    overflow: hidden;
    transition: border-color 0.2s;
  }
  .upload-area { cursor: pointer; }
  .upload-area.dragover, .upload-area:hover { border-color: #8b5cf6; }
  .result-area { border-style: solid; flex-direction: column; gap: 12px; padding: 16px; }

  .placeholder { color: #666; font-size: 0.85rem; text-align: center; padding: 16px; }
  .preview { max-width: 100%; max-height: 100%; display: none; }
  .preview.visible { display: block; }
  .hidden { display: none !important; }

  #result-container img { max-width: 100%; border-radius: 8px; }
  #result-text { font-size: 0.85rem; color: #aaa; line-height: 1.5; white-space: pre-wrap; }

  .spinner {
    width: 28px; height: 28px;
    border: 3px solid #2a2a2a;
    border-top-color: #8b5cf6;
    border-radius: 50%;
    animation: spin 0.8s linear infinite;
  }
  @keyframes spin { to { transform: rotate(360deg); } }

  button {
    margin-top: 20px;
    background: #8b5cf6;
    color: #fff;
    border: none;
    border-radius: 8px;
    padding: 10px 22px;
    font-size: 0.9rem;
    cursor: pointer;
  }
  button:disabled { background: #2a2a2a; color: #666; cursor: not-allowed; }
  label.caption { display: block; font-size: 0.75rem; color: #888; margin-bottom: 8px; text-transform: uppercase; letter-spacing: 0.5px; }
</style>
</head>
<body>
<h1>Style Studio</h1>
<div class="layout">
  <div>
    <label class="caption">Content image</label>
    <div id="upload-area" class="upload-area" data-role="input">
      <div id="upload-placeholder" class="placeholder">Click or drop the image to restyle</div>
      <img id="input-preview" class="preview" alt="Content preview">
    </div>
    <input id="image-upload" type="file" accept="image/*" hidden>
  </div>
  <div>
    <label class="caption">Style image</label>
    <div id="concept-upload-area" class="upload-area" data-role="concept">
      <div id="concept-placeholder" class="placeholder">Click or drop the style reference</div>
      <img id="concept-preview" class="preview" alt="Style preview">
    </div>
    <input id="concept-upload" type="file" accept="image/*" hidden>
  </div>
  <div>
    <label class="caption">Result</label>
    <div id="result-area" class="result-area">
      <div id="result-placeholder" class="placeholder">Your stylized image will appear here</div>
      <div id="loader" class="spinner hidden"></div>
      <div id="result-container" class="hidden"><img id="result-image" alt="Result"></div>
      <div id="result-text"></div>
    </div>
  </div>
</div>
<button id="generate-btn" disabled>Generate</button>

<script>
  const $ = id => document.getElementById(id);
  let pollTimer = null;

  function setPreview(img, placeholder, show, uri) {
    img.classList.toggle('visible', show);
    placeholder.classList.toggle('hidden', show);
    if (show) img.src = uri;
  }

  function render(view) {
    setPreview($('input-preview'), $('upload-placeholder'), view.showInputPreview, view.inputPreviewDataUri);
    setPreview($('concept-preview'), $('concept-placeholder'), view.showConceptPreview, view.conceptPreviewDataUri);
    $('generate-btn').disabled = !view.generateEnabled;
    $('loader').classList.toggle('hidden', !view.showLoader);
    $('result-placeholder').classList.toggle('hidden', !view.showResultPlaceholder);
    $('result-container').classList.toggle('hidden', !view.showResultImage);
    if (view.resultImageDataUri) $('result-image').src = view.resultImageDataUri;
    $('result-text').textContent = view.resultText || '';

    clearTimeout(pollTimer);
    if (view.showLoader) pollTimer = setTimeout(refresh, 700);
  }

  function apply(data) {
    if (data.view) render(data.view);
    (data.warnings || []).forEach(w => alert(w));
    if (data.error) alert(data.error);
  }

  async function refresh() {
    const res = await fetch('/api/state');
    apply(await res.json());
  }

  async function uploadFile(file, role) {
    const body = new FormData();
    body.append('file', file);
    const res = await fetch('/api/images/' + role, { method: 'POST', body });
    apply(await res.json());
  }

  async function generate() {
    const res = await fetch('/api/generate', { method: 'POST' });
    apply(await res.json());
  }

  function wire(area, input) {
    const role = area.dataset.role;
    area.addEventListener('click', () => input.click());
    area.addEventListener('dragover', e => { e.preventDefault(); area.classList.add('dragover'); });
    area.addEventListener('dragleave', () => area.classList.remove('dragover'));
    area.addEventListener('drop', e => {
      e.preventDefault();
      area.classList.remove('dragover');
      if (e.dataTransfer && e.dataTransfer.files[0]) uploadFile(e.dataTransfer.files[0], role);
    });
    input.addEventListener('change', () => {
      if (input.files && input.files[0]) uploadFile(input.files[0], role);
      input.value = '';
    });
  }

  wire($('upload-area'), $('image-upload'));
  wire($('concept-upload-area'), $('concept-upload'));
  $('generate-btn').addEventListener('click', generate);
  refresh();
</script>
</body>
</html>
"""

if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run(debug=True, port=int(os.environ.get("PORT", 5001)), threaded=True, use_reloader=False)
