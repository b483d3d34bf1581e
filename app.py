import functools
import logging
import uuid
from flask import Flask, request, jsonify, session

from auth import user_from_headers
from config import AVAILABLE_MODELS, load_settings
from controller import ClipboardError, GenerationController, Outcome
from generator import GeminiTextService
from system_prompt import TIPS
from workspace import Workspace, WorkspaceRegistry

logger = logging.getLogger(__name__)

OUTCOME_STATUS = {
    Outcome.SUCCEEDED: 200,
    Outcome.DISCARDED: 200,
    Outcome.INVALID: 400,
    Outcome.BUSY: 409,
    Outcome.FAILED: 502,
}


class BrowserClipboard:
    """Clipboard sink for a write the page already attempted with navigator.clipboard."""

    def __init__(self, error=None):
        self.error = error
        self.text = None

    def write_text(self, text):
        if self.error:
            raise ClipboardError(self.error)
        self.text = text


def create_app(settings=None, service=None):
    settings = settings or load_settings()
    service = service or GeminiTextService(
        api_key=settings.gemini_api_key,
        timeout_ms=settings.http_timeout_ms,
    )

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["SETTINGS"] = settings

    registry = WorkspaceRegistry(
        lambda: Workspace(GenerationController.from_settings(settings, service)),
        ttl=settings.workspace_ttl_seconds,
    )
    app.extensions["workspaces"] = registry

    def current_workspace():
        user = user_from_headers(
            request.headers,
            header_name=settings.auth_email_header,
            dev_email=settings.dev_user_email,
        )
        sid = session.get("sid")
        if sid is None:
            if user is None:
                return None
            sid = session["sid"] = uuid.uuid4().hex
            logger.info("New workspace for %s", user.email)

        workspace = registry.get_or_create(sid)
        workspace.identity.update(user)
        if user is None:
            return None
        return workspace

    def signed_in(view):
        @functools.wraps(view)
        def wrapper(*args, **kwargs):
            workspace = current_workspace()
            if workspace is None:
                return jsonify({"error": "Not signed in"}), 401
            return view(workspace, *args, **kwargs)
        return wrapper

    def read_json():
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def pick_model(data):
        model = data.get("model") or settings.model
        if model not in AVAILABLE_MODELS:
            raise ValueError(f"Unknown model: {model}")
        return model

    @app.route("/")
    def index():
        return HTML_PAGE

    @app.route("/api/models")
    def models():
        return jsonify({"models": AVAILABLE_MODELS, "default": settings.model})

    @app.route("/api/session")
    @signed_in
    def session_info(workspace):
        return jsonify({"user": workspace.user.to_dict(), "tips": TIPS})

    @app.route("/api/state")
    @signed_in
    def state(workspace):
        return jsonify(workspace.state())

    @app.route("/api/form", methods=["POST"])
    @signed_in
    def update_form(workspace):
        data = read_json()
        try:
            workspace.form.update(data.get("fields") or {})
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify(workspace.state())

    @app.route("/api/generate", methods=["POST"])
    @signed_in
    def generate(workspace):
        data = read_json()
        try:
            model = pick_model(data)
            if data.get("fields"):
                workspace.form.update(data["fields"])
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        outcome = workspace.generate(model=model)
        return jsonify({"outcome": outcome.value, **workspace.state()}), OUTCOME_STATUS[outcome]

    @app.route("/api/regenerate", methods=["POST"])
    @signed_in
    def regenerate(workspace):
        try:
            model = pick_model(read_json())
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        outcome = workspace.regenerate(model=model)
        return jsonify({"outcome": outcome.value, **workspace.state()}), OUTCOME_STATUS[outcome]

    @app.route("/api/copy", methods=["POST"])
    @signed_in
    def copy(workspace):
        data = read_json()
        clipboard = BrowserClipboard(error=data.get("error"))
        ok = workspace.controller.copy(text=data.get("text"), clipboard=clipboard)
        return jsonify({"copied": ok, **workspace.state()})

    @app.route("/api/reset", methods=["POST"])
    @signed_in
    def reset(workspace):
        workspace.reset()
        return jsonify(workspace.state())

    return app


HTML_PAGE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>AI Cold Email Generator</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: #0f0f0f;
    color: #e0e0e0;
    min-height: 100vh;
  }

  header {
    max-width: 1100px;
    margin: 0 auto;
    padding: 20px 24px;
    display: flex;
    align-items: center;
    gap: 10px;
    border-bottom: 1px solid #1e1e1e;
  }
  header h1 { font-size: 1.1rem; font-weight: 600; color: #fff; }
  header .sub { font-size: 0.72rem; color: #888; }
  header .user { margin-left: auto; font-size: 0.75rem; color: #888; }

  .badge {
    font-size: 0.65rem;
    padding: 2px 8px;
    border-radius: 4px;
    font-weight: 500;
    text-transform: uppercase;
    letter-spacing: 0.5px;
    background: #2e1e3a;
    color: #a78bfa;
  }

  .loading-screen {
    display: flex;
    align-items: center;
    justify-content: center;
    gap: 10px;
    min-height: 100vh;
    color: #888;
  }

  main {
    max-width: 1100px;
    margin: 0 auto;
    padding: 20px 24px 80px;
    display: flex;
    gap: 20px;
  }
  main.hidden, header.hidden, .loading-screen.hidden { display: none; }

  .panel {
    flex: 1;
    min-width: 0;
    display: flex;
    flex-direction: column;
    gap: 12px;
  }
  .panel h2 { font-size: 0.95rem; font-weight: 600; color: #fff; }

  .row { display: flex; gap: 10px; }
  .field { flex: 1; display: flex; flex-direction: column; gap: 4px; }
  label { font-size: 0.72rem; color: #888; }

  input, select, textarea {
    width: 100%;
    background: #1a1a1a;
    color: #e0e0e0;
    border: 1px solid #2a2a2a;
    border-radius: 8px;
    padding: 8px 12px;
    font-size: 0.85rem;
    font-family: inherit;
    outline: none;
    transition: border-color 0.2s;
  }
  input:focus, select:focus, textarea:focus { border-color: #8b5cf6; }
  textarea { resize: vertical; line-height: 1.5; }
  ::placeholder { color: #555; }

  button {
    background: #8b5cf6;
    color: #fff;
    border: none;
    border-radius: 8px;
    padding: 8px 20px;
    font-size: 0.82rem;
    font-weight: 500;
    cursor: pointer;
    transition: background 0.2s, opacity 0.2s;
  }
  button:hover { background: #7c3aed; }
  button:disabled { opacity: 0.5; cursor: not-allowed; }
  button.secondary {
    background: #232323;
    color: #aaa;
    border: 1px solid #333;
  }
  button.secondary:hover { background: #2e2e2e; color: #e0e0e0; }

  .tips {
    background: #141420;
    border: 1px solid #2e1e3a;
    border-radius: 10px;
    padding: 12px 16px 12px 32px;
    font-size: 0.8rem;
    color: #c4b5fd;
    line-height: 1.6;
  }
  .tips.hidden { display: none; }

  .output-card {
    background: #1a1a1a;
    border: 1px solid #2a2a2a;
    border-radius: 10px;
    padding: 16px;
    white-space: pre-wrap;
    word-break: break-word;
    line-height: 1.6;
    font-size: 0.9rem;
    font-family: 'SF Mono', 'Fira Code', 'Cascadia Code', monospace;
  }
  .placeholder { color: #555; text-align: center; padding: 40px 0; font-size: 0.85rem; }

  .progress { width: 100%; height: 6px; background: #2a2a2a; border-radius: 3px; overflow: hidden; }
  .progress-bar { height: 6px; width: 0; background: #8b5cf6; transition: width 0.2s; }

  .status { font-size: 0.78rem; color: #888; min-height: 1.2em; }
  .spinner {
    display: inline-block;
    width: 14px; height: 14px;
    border: 2px solid #333;
    border-top-color: #8b5cf6;
    border-radius: 50%;
    animation: spin 0.8s linear infinite;
    vertical-align: middle;
    margin-right: 6px;
  }
  @keyframes spin { to { transform: rotate(360deg); } }

  .actions { display: flex; gap: 8px; }
  .hidden { display: none; }

  .toasts {
    position: fixed;
    bottom: 20px;
    right: 24px;
    display: flex;
    flex-direction: column;
    gap: 8px;
    z-index: 1000;
  }
  .toast {
    background: #1a1a1a;
    border: 1px solid #333;
    border-radius: 10px;
    padding: 10px 16px;
    font-size: 0.8rem;
    box-shadow: 0 4px 24px rgba(0,0,0,0.5);
  }
  .toast.success { border-color: #4ade80; color: #bbf7d0; }
  .toast.error { border-color: #ef4444; color: #fca5a5; }
  .toast.warning { border-color: #f59e0b; color: #fde68a; }
</style>
</head>
<body>

<div id="loadingScreen" class="loading-screen"><span class="spinner"></span>Loading...</div>

<header id="header" class="hidden">
  <div>
    <h1>AI Cold Email Generator</h1>
    <div class="sub">Personalized, research-driven cold emails</div>
  </div>
  <span class="badge">AI</span>
  <button class="secondary" onclick="toggleTips()">Tips</button>
  <span id="userEmail" class="user"></span>
</header>

<main id="main" class="hidden">

  <!-- ── LEFT: Details ── -->
  <div class="panel">
    <h2>Fill in Details</h2>
    <ul id="tips" class="tips hidden"></ul>
    <div class="row">
      <div class="field"><label for="recipientName">Recipient Name *</label>
        <input id="recipientName" placeholder="John Doe"></div>
      <div class="field"><label for="recipientCompany">Recipient Company *</label>
        <input id="recipientCompany" placeholder="Acme Corp"></div>
    </div>
    <div class="row">
      <div class="field"><label for="recipientRole">Recipient Role</label>
        <input id="recipientRole" placeholder="CEO, CTO, etc."></div>
      <div class="field"><label for="recipientIndustry">Industry</label>
        <input id="recipientIndustry" placeholder="Tech, Healthcare, etc."></div>
    </div>
    <div class="row">
      <div class="field"><label for="senderName">Your Name</label>
        <input id="senderName" placeholder="Jane Smith"></div>
      <div class="field"><label for="senderCompany">Your Company</label>
        <input id="senderCompany" placeholder="Your Company Inc."></div>
    </div>
    <div class="row">
      <div class="field"><label for="senderRole">Your Role</label>
        <input id="senderRole" placeholder="Sales Director"></div>
      <div class="field"><label for="tone">Tone</label>
        <select id="tone">
          <option value="professional" selected>Professional</option>
          <option value="friendly">Friendly</option>
          <option value="casual">Casual</option>
          <option value="formal">Formal</option>
          <option value="enthusiastic">Enthusiastic</option>
        </select></div>
    </div>
    <div class="field"><label for="purpose">Purpose *</label>
      <textarea id="purpose" rows="2" placeholder="I want to schedule a demo of our new platform..."></textarea></div>
    <div class="field"><label for="additionalInfo">Additional Info</label>
      <textarea id="additionalInfo" rows="2" placeholder="Recent news, mutual connections, etc."></textarea></div>
    <div class="field"><label for="model">Model</label>
      <select id="model"></select></div>
    <div class="actions">
      <button id="generateBtn" onclick="generateEmail()" disabled>Generate Email</button>
      <button class="secondary" onclick="resetAll()">Reset</button>
    </div>
  </div>

  <!-- ── RIGHT: Generated Email ── -->
  <div class="panel">
    <h2>Generated Email</h2>
    <div id="generating" class="hidden">
      <div class="status"><span class="spinner"></span>Researching and writing your email...</div>
      <div class="progress"><div id="progressBar" class="progress-bar"></div></div>
    </div>
    <div id="output" class="output-card hidden"></div>
    <div id="outputActions" class="actions hidden">
      <button id="copyBtn" class="secondary" onclick="copyEmail()">Copy</button>
      <button class="secondary" onclick="regenerateEmail()">Regenerate</button>
    </div>
    <div id="empty" class="placeholder">Your AI-powered cold email will appear here.</div>
  </div>

</main>

<div id="toasts" class="toasts"></div>

<script>
  const FIELDS = ['recipientName', 'recipientCompany', 'recipientRole', 'recipientIndustry',
                  'senderName', 'senderCompany', 'senderRole', 'purpose', 'tone', 'additionalInfo'];
  const SNAKE = {
    recipientName: 'recipient_name', recipientCompany: 'recipient_company',
    recipientRole: 'recipient_role', recipientIndustry: 'recipient_industry',
    senderName: 'sender_name', senderCompany: 'sender_company', senderRole: 'sender_role',
    purpose: 'purpose', tone: 'tone', additionalInfo: 'additional_info',
  };
  const REQUIRED = ['recipientName', 'recipientCompany', 'purpose'];

  const generateBtn = document.getElementById('generateBtn');
  const modelEl = document.getElementById('model');
  let pollTimer = null;
  let inFlight = false;
  let serverBusy = false;

  // ── API call helper ──
  async function callApi(path, body) {
    const opts = body === undefined ? {} : {
      method: 'POST',
      headers: { 'Content-Type': 'application/json' },
      body: JSON.stringify(body),
    };
    const res = await fetch(path, opts);
    const data = await res.json();
    return { ok: res.ok, status: res.status, data };
  }

  function readFields() {
    const fields = {};
    FIELDS.forEach(f => { fields[f] = document.getElementById(f).value; });
    return fields;
  }

  function canGenerate() {
    return REQUIRED.every(f => document.getElementById(f).value.trim());
  }

  function refreshButton() {
    generateBtn.disabled = inFlight || serverBusy || !canGenerate();
    generateBtn.textContent = (inFlight || serverBusy) ? 'Generating...' : 'Generate Email';
  }

  function toast(notice) {
    const el = document.createElement('div');
    el.className = 'toast ' + notice.level;
    el.textContent = notice.message;
    document.getElementById('toasts').appendChild(el);
    setTimeout(() => el.remove(), 3000);
  }

  function render(state) {
    if (!state || !state.generation) return;
    (state.notices || []).forEach(toast);

    const gen = state.generation;
    // a reset flight still holds the generation lock until the model answers
    serverBusy = gen.busy;
    if (serverBusy && !pollTimer) startPolling();
    if (!serverBusy && !inFlight && pollTimer) stopPolling();
    refreshButton();
    const generating = gen.status === 'generating';
    document.getElementById('generating').classList.toggle('hidden', !generating);
    document.getElementById('progressBar').style.width = gen.progress + '%';

    const hasText = !!gen.text && !generating;
    const output = document.getElementById('output');
    output.textContent = gen.text;
    output.classList.toggle('hidden', !hasText);
    document.getElementById('outputActions').classList.toggle('hidden', !hasText);
    document.getElementById('empty').classList.toggle('hidden', hasText || generating);
    document.getElementById('copyBtn').textContent = gen.copied ? 'Copied!' : 'Copy';
  }

  function fillForm(form) {
    FIELDS.forEach(f => { document.getElementById(f).value = form[SNAKE[f]]; });
    refreshButton();
  }

  function startPolling() {
    stopPolling();
    pollTimer = setInterval(async () => {
      const { data } = await callApi('/api/state');
      render(data);
    }, 200);
  }

  function stopPolling() { clearInterval(pollTimer); pollTimer = null; }

  async function runGeneration(path, body) {
    inFlight = true;
    refreshButton();
    startPolling();
    try {
      const { data } = await callApi(path, body);
      stopPolling();
      if (data.error) toast({ level: 'error', message: data.error });
      render(data);
    } catch (e) {
      stopPolling();
      toast({ level: 'error', message: 'Failed to generate email. Please try again.' });
    } finally {
      inFlight = false;
      refreshButton();
    }
  }

  function generateEmail() {
    return runGeneration('/api/generate', { fields: readFields(), model: modelEl.value });
  }

  function regenerateEmail() {
    return runGeneration('/api/regenerate', { model: modelEl.value });
  }

  async function copyEmail() {
    const text = document.getElementById('output').textContent;
    let error = null;
    try {
      await navigator.clipboard.writeText(text);
    } catch (e) {
      error = e.message || 'Clipboard unavailable';
    }
    const { data } = await callApi('/api/copy', { text, error });
    render(data);
    if (data.copied) {
      setTimeout(async () => render((await callApi('/api/state')).data), 2100);
    }
  }

  async function resetAll() {
    const { data } = await callApi('/api/reset', {});
    fillForm(data.form);
    render(data);
  }

  function toggleTips() {
    document.getElementById('tips').classList.toggle('hidden');
  }

  FIELDS.forEach(f => {
    const el = document.getElementById(f);
    el.addEventListener('input', refreshButton);
    el.addEventListener('change', () => callApi('/api/form', { fields: { [f]: el.value } }));
  });

  document.getElementById('purpose').addEventListener('keydown', e => {
    if (e.key === 'Enter' && (e.metaKey || e.ctrlKey)) { e.preventDefault(); if (canGenerate()) generateEmail(); }
  });

  async function boot() {
    const session = await callApi('/api/session');
    if (!session.ok) {
      setTimeout(boot, 2000);
      return;
    }
    document.getElementById('userEmail').textContent = session.data.user.email;
    const tipsEl = document.getElementById('tips');
    session.data.tips.forEach(t => {
      const li = document.createElement('li');
      li.textContent = t;
      tipsEl.appendChild(li);
    });

    const models = (await callApi('/api/models')).data;
    models.models.forEach(m => {
      const opt = document.createElement('option');
      opt.value = m;
      opt.textContent = m;
      opt.selected = m === models.default;
      modelEl.appendChild(opt);
    });

    const state = (await callApi('/api/state')).data;
    fillForm(state.form);
    render(state);

    document.getElementById('loadingScreen').classList.add('hidden');
    document.getElementById('header').classList.remove('hidden');
    document.getElementById('main').classList.remove('hidden');
  }

  boot();
</script>
</body>
</html>
"""

app = create_app()

if __name__ == "__main__":
    logging.basicConfig(
        level=app.config["SETTINGS"].log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app.run(debug=True, port=app.config["SETTINGS"].port, threaded=True)
