"""
Main entry point for the conversational resume builder with web UI.
"""

import argparse
import io
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, render_template_string, request, send_file

from resumechat.config import Settings, get_settings
from resumechat.exceptions import (
    AIServiceError,
    PdfCompilationError,
    ResumeGenerationError,
    ResumeNotFoundError,
)
from resumechat.models import Message, Resume
from resumechat.services import (
    AIService,
    ChatService,
    DocumentStore,
    PdfService,
    ProfileService,
    ResumeService,
    create_store,
)
from resumechat.utils.latex_preview import render_latex_preview
from resumechat.utils.logger import get_logger, setup_logging
from resumechat.utils.paths import get_log_file_path

# Load environment variables
load_dotenv()

logger = get_logger(__name__)

# Flask app
app = Flask(__name__)

EXTENSION_KEY = "resumechat"

# HTML Template
HTML_TEMPLATE = '''
<!DOCTYPE html>
<html>
<head>
    <title>📝 Resume Chat</title>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #0a0a0a;
            min-height: 100vh;
            padding: 20px;
            color: #e0e0e0;
        }
        .container { max-width: 1400px; margin: 0 auto; }
        .header {
            background: #1a1a1a;
            border-radius: 12px;
            padding: 25px;
            margin-bottom: 20px;
            border: 1px solid #2a2a2a;
        }
        h1 { color: #ffffff; font-size: 28px; margin-bottom: 5px; }
        .subtitle { color: #888; font-size: 14px; }
        .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 20px; }
        .card {
            background: #1a1a1a;
            border-radius: 12px;
            padding: 25px;
            border: 1px solid #2a2a2a;
        }
        .card h2 { color: #ffffff; font-size: 20px; margin-bottom: 20px; }
        input[type="text"], textarea {
            width: 100%;
            padding: 12px;
            border: 1px solid #2a2a2a;
            border-radius: 8px;
            font-size: 14px;
            background: #0a0a0a;
            color: #e0e0e0;
        }
        button {
            background: #2a2a2a;
            color: #e0e0e0;
            border: 1px solid #3a3a3a;
            padding: 10px 20px;
            font-size: 14px;
            font-weight: 600;
            border-radius: 8px;
            cursor: pointer;
            margin-top: 10px;
        }
        button:hover { background: #3a3a3a; }
        button:disabled { opacity: 0.4; cursor: not-allowed; }
        .messages { height: 420px; overflow-y: auto; margin-bottom: 10px; }
        .msg { padding: 10px 14px; border-radius: 8px; margin-bottom: 8px; white-space: pre-wrap; font-size: 14px; }
        .msg.user { background: #2a2a2a; margin-left: 40px; }
        .msg.assistant { background: #0a0a0a; border: 1px solid #2a2a2a; margin-right: 40px; }
        .resume-item { border: 1px solid #2a2a2a; border-radius: 10px; padding: 12px; margin-bottom: 10px; background: #0a0a0a; }
        .resume-item .title { font-weight: 600; color: #ffffff; }
        .resume-item .meta { color: #666; font-size: 12px; }
        .resume-item button { margin-right: 6px; padding: 6px 12px; }
        .preview { background: #ffffff; color: #111; border-radius: 8px; padding: 30px; margin-top: 20px; font-family: Georgia, serif; }
        .preview h1.resume-name { text-align: center; font-size: 26px; }
        .preview .resume-contact { text-align: center; font-size: 13px; margin-bottom: 10px; }
        .preview h2.resume-section { border-bottom: 1px solid #111; font-size: 16px; margin: 14px 0 6px; text-transform: uppercase; }
        .preview .entry-header { display: flex; justify-content: space-between; }
        .preview .entry-meta { font-style: italic; font-size: 13px; }
        .preview ul { margin-left: 20px; }
        .preview .center { text-align: center; }
        .preview .right { text-align: right; }
        .status { padding: 10px; border-radius: 8px; margin-top: 10px; font-size: 14px; color: #888; }
        .section { margin-top: 20px; }
        label { display: block; color: #888; font-size: 12px; margin: 10px 0 4px; }
        .fields { display: grid; grid-template-columns: 1fr 1fr; gap: 0 12px; }
        #editLatex { font-family: Menlo, Consolas, monospace; font-size: 13px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>📝 Resume Chat</h1>
            <p class="subtitle">Tell the assistant about your career, then paste a job description and ask for a resume</p>
        </div>

        <div class="grid">
            <div class="card">
                <h2>💬 Chat</h2>
                <div class="messages" id="messages"></div>
                <textarea id="prompt" rows="4" placeholder="e.g. I worked at Acme as a backend engineer from 2019 to 2023..."></textarea>
                <button id="sendBtn" onclick="sendMessage()">Send</button>
                <div class="status" id="chatStatus"></div>
            </div>

            <div class="card">
                <h2>📄 My Resumes</h2>
                <div id="resumes"></div>
                <button onclick="loadResumes()">Refresh</button>
            </div>
        </div>

        <div class="grid section">
            <div class="card">
                <h2>👤 Profile</h2>
                <div class="fields">
                    <div><label for="pf-name">Name</label><input type="text" id="pf-name"></div>
                    <div><label for="pf-email">Email</label><input type="text" id="pf-email"></div>
                    <div><label for="pf-phone">Phone</label><input type="text" id="pf-phone"></div>
                    <div><label for="pf-headline">Headline</label><input type="text" id="pf-headline"></div>
                </div>
                <label for="pf-summary">Summary</label><textarea id="pf-summary" rows="3"></textarea>
                <label for="pf-skills">Skills</label><textarea id="pf-skills" rows="2"></textarea>
                <label for="pf-experience">Experience</label><textarea id="pf-experience" rows="4"></textarea>
                <label for="pf-education">Education</label><textarea id="pf-education" rows="3"></textarea>
                <label for="pf-projects">Projects</label><textarea id="pf-projects" rows="3"></textarea>
                <label for="pf-extracurriculars">Extracurriculars</label><textarea id="pf-extracurriculars" rows="2"></textarea>
                <label for="pf-honors_and_awards">Honors and awards</label><textarea id="pf-honors_and_awards" rows="2"></textarea>
                <button id="saveProfileBtn" onclick="saveProfile()">Save profile</button>
                <div class="status" id="profileStatus"></div>
            </div>

            <div class="card">
                <h2>✨ New Resume</h2>
                <label for="newTitle">Title</label>
                <input type="text" id="newTitle" placeholder="e.g. Backend Engineer at Acme">
                <label for="newJob">Job description</label>
                <textarea id="newJob" rows="10" placeholder="Paste the job description here"></textarea>
                <button id="createBtn" onclick="createResume()">Generate resume</button>
                <div class="status" id="createStatus"></div>
            </div>
        </div>

        <div class="card section" id="editor" style="display:none">
            <h2>✏️ Edit Resume</h2>
            <label for="editTitle">Title</label>
            <input type="text" id="editTitle">
            <label for="editLatex">LaTeX</label>
            <textarea id="editLatex" rows="20" oninput="schedulePreview()"></textarea>
            <button onclick="saveResume()">Save</button>
            <button onclick="compileResume()">Compile PDF</button>
            <button onclick="closeEditor()">Close</button>
            <div class="status" id="editStatus"></div>
        </div>

        <div class="preview" id="preview" style="display:none"></div>
    </div>

    <script>
        let uid = localStorage.getItem('resumechat-uid');
        if (!uid) {
            uid = 'user-' + Math.random().toString(36).slice(2, 10);
            localStorage.setItem('resumechat-uid', uid);
        }
        const history = [];

        async function api(path, options) {
            options = options || {};
            options.headers = Object.assign({'Content-Type': 'application/json', 'X-User-Id': uid}, options.headers || {});
            const res = await fetch(path, options);
            const data = await res.json();
            if (!res.ok) throw new Error(data.error || 'An error occurred. Please try again.');
            return data;
        }

        function addMessage(role, content) {
            const div = document.createElement('div');
            div.className = 'msg ' + role;
            div.textContent = content;
            document.getElementById('messages').appendChild(div);
            div.scrollIntoView();
        }

        async function sendMessage() {
            const box = document.getElementById('prompt');
            const prompt = box.value.trim();
            if (!prompt) return;
            const btn = document.getElementById('sendBtn');
            const status = document.getElementById('chatStatus');
            addMessage('user', prompt);
            box.value = '';
            btn.disabled = true;
            status.textContent = 'Thinking...';
            try {
                const data = await api('/chat', {method: 'POST', body: JSON.stringify({prompt: prompt, history: history})});
                history.push({role: 'user', content: prompt});
                history.push({role: 'assistant', content: data.reply});
                addMessage('assistant', data.reply);
                if (data.resume_id) {
                    await loadResumes();
                    await showPreview(data.resume_id);
                }
                status.textContent = '';
            } catch (e) {
                status.textContent = '❌ ' + e.message;
            } finally {
                btn.disabled = false;
            }
        }

        async function loadResumes() {
            const list = document.getElementById('resumes');
            try {
                const data = await api('/resumes');
                list.innerHTML = '';
                if (!data.resumes.length) {
                    list.textContent = 'No resumes yet.';
                    return;
                }
                data.resumes.forEach(function (r) {
                    const item = document.createElement('div');
                    item.className = 'resume-item';
                    const title = document.createElement('div');
                    title.className = 'title';
                    title.textContent = r.title;
                    const meta = document.createElement('div');
                    meta.className = 'meta';
                    meta.textContent = new Date(r.created_at).toLocaleString() + (r.has_pdf ? ' · PDF ready' : '');
                    item.appendChild(title);
                    item.appendChild(meta);
                    [['Preview', function () { showPreview(r.id); }],
                     ['Edit', function () { editResume(r.id); }],
                     ['.tex', function () { download(r.id, 'tex'); }],
                     ['PDF', function () { download(r.id, 'pdf'); }],
                     ['Delete', function () { removeResume(r.id); }]].forEach(function (pair) {
                        const b = document.createElement('button');
                        b.textContent = pair[0];
                        b.onclick = pair[1];
                        item.appendChild(b);
                    });
                    list.appendChild(item);
                });
            } catch (e) {
                list.textContent = '❌ ' + e.message;
            }
        }

        async function showPreview(id) {
            const data = await api('/resumes/' + id + '/preview');
            const preview = document.getElementById('preview');
            preview.innerHTML = data.html;
            preview.style.display = 'block';
        }

        function download(id, kind) {
            window.location = '/resumes/' + id + '/download.' + kind + '?uid=' + encodeURIComponent(uid);
        }

        async function removeResume(id) {
            if (!confirm('Delete this resume?')) return;
            await api('/resumes/' + id, {method: 'DELETE'});
            document.getElementById('preview').style.display = 'none';
            await loadResumes();
        }

        const PROFILE_FIELDS = ['name', 'email', 'phone', 'headline', 'summary', 'skills', 'experience',
                                'education', 'projects', 'extracurriculars', 'honors_and_awards'];

        async function loadProfile() {
            const status = document.getElementById('profileStatus');
            try {
                const data = await api('/profile');
                PROFILE_FIELDS.forEach(function (f) {
                    document.getElementById('pf-' + f).value = data.profile[f] || '';
                });
                status.textContent = '';
            } catch (e) {
                status.textContent = '❌ ' + e.message;
            }
        }

        async function saveProfile() {
            const status = document.getElementById('profileStatus');
            const body = {};
            PROFILE_FIELDS.forEach(function (f) {
                body[f] = document.getElementById('pf-' + f).value.trim();
            });
            if (!body.email) body.email = null;
            try {
                await api('/profile', {method: 'PUT', body: JSON.stringify(body)});
                status.textContent = '✅ Profile saved';
            } catch (e) {
                status.textContent = '❌ ' + e.message;
            }
        }

        async function createResume() {
            const title = document.getElementById('newTitle').value.trim();
            const job = document.getElementById('newJob').value.trim();
            const status = document.getElementById('createStatus');
            const btn = document.getElementById('createBtn');
            if (!title || !job) {
                status.textContent = 'Title and job description required';
                return;
            }
            btn.disabled = true;
            status.textContent = 'Generating...';
            try {
                const data = await api('/resumes', {method: 'POST', body: JSON.stringify({title: title, job_description: job})});
                document.getElementById('newTitle').value = '';
                document.getElementById('newJob').value = '';
                status.textContent = '✅ Resume created';
                await loadResumes();
                await editResume(data.resume.id);
            } catch (e) {
                status.textContent = '❌ ' + e.message;
            } finally {
                btn.disabled = false;
            }
        }

        let editingId = null;
        let previewTimer = null;

        async function editResume(id) {
            const data = await api('/resumes/' + id);
            editingId = id;
            document.getElementById('editTitle').value = data.resume.title;
            document.getElementById('editLatex').value = data.resume.latex_content;
            document.getElementById('editStatus').textContent = '';
            document.getElementById('editor').style.display = 'block';
            await renderDraft();
        }

        function closeEditor() {
            editingId = null;
            document.getElementById('editor').style.display = 'none';
        }

        function schedulePreview() {
            clearTimeout(previewTimer);
            previewTimer = setTimeout(renderDraft, 400);
        }

        async function renderDraft() {
            const data = await api('/preview', {method: 'POST', body: JSON.stringify({latex: document.getElementById('editLatex').value})});
            const preview = document.getElementById('preview');
            preview.innerHTML = data.html;
            preview.style.display = 'block';
        }

        async function saveResume() {
            const status = document.getElementById('editStatus');
            try {
                await api('/resumes/' + editingId, {method: 'PUT', body: JSON.stringify({
                    title: document.getElementById('editTitle').value.trim(),
                    latex_content: document.getElementById('editLatex').value
                })});
                status.textContent = '✅ Saved';
                await loadResumes();
                return true;
            } catch (e) {
                status.textContent = '❌ ' + e.message;
                return false;
            }
        }

        async function compileResume() {
            const status = document.getElementById('editStatus');
            status.textContent = 'Compiling...';
            try {
                if (!(await saveResume())) return;
                await api('/resumes/' + editingId + '/compile', {method: 'POST'});
                status.textContent = '✅ PDF ready';
                await loadResumes();
            } catch (e) {
                status.textContent = '❌ ' + e.message;
            }
        }

        loadProfile();
        loadResumes();
    </script>
</body>
</html>
'''


def init_app(
    settings: Optional[Settings] = None,
    ai_service: Optional[AIService] = None,
    store: Optional[DocumentStore] = None,
    pdf_service: Optional[PdfService] = None
) -> Flask:
    """
    Wire the services into the Flask app.

    Args:
        settings: Application settings, loaded from config.json when omitted
        ai_service: AI service override
        store: Document store override
        pdf_service: PDF compiler override

    Returns:
        The configured app
    """
    settings = settings or get_settings()
    ai_service = ai_service or AIService(settings)
    store = store or create_store(settings)
    pdf_service = pdf_service or PdfService(settings)

    profile_service = ProfileService(settings, store)
    resume_service = ResumeService(settings, ai_service, pdf_service, profile_service, store)
    chat_service = ChatService(settings, ai_service, profile_service, resume_service)

    app.extensions[EXTENSION_KEY] = {
        'settings': settings,
        'profile_service': profile_service,
        'resume_service': resume_service,
        'chat_service': chat_service,
    }
    logger.info(f"Services ready (model: {ai_service.model}, store: {type(store).__name__})")
    return app


def _service(name: str):
    if EXTENSION_KEY not in app.extensions:
        init_app()
    return app.extensions[EXTENSION_KEY][name]


def _current_user() -> str:
    """Return the caller's user id from the X-User-Id header or uid query parameter."""
    uid = (request.headers.get('X-User-Id') or request.args.get('uid') or '').strip()
    if not uid:
        raise ValueError('User id required (X-User-Id header or uid parameter)')
    return uid


def _owned_resume(resume_id: str, uid: str) -> Resume:
    resume = _service('resume_service').get_resume(resume_id)
    if resume.user_id != uid:
        # Other users' resumes are reported as missing
        raise ResumeNotFoundError(resume_id)
    return resume


def _resume_summary(resume: Resume) -> dict:
    summary = resume.model_dump(mode='json', exclude={'latex_content', 'pdf_data_uri', 'job_description'})
    summary['has_pdf'] = bool(resume.pdf_data_uri)
    return summary


def _error_response(e: Exception, action: str):
    """Map a service exception to a JSON error response."""
    if isinstance(e, ResumeNotFoundError):
        logger.warning(f"{action}: {e}")
        return jsonify({'error': 'Resume not found', 'success': False}), 404
    if isinstance(e, ValueError):
        logger.warning(f"{action}: {e}")
        return jsonify({'error': str(e), 'success': False}), 400
    if isinstance(e, PdfCompilationError):
        logger.error(f"{action}: {e}")
        return jsonify({'error': 'Failed to compile PDF. Please try again.', 'success': False}), 502
    if isinstance(e, (AIServiceError, ResumeGenerationError)):
        logger.error(f"{action}: {e}")
        return jsonify({'error': 'Failed to generate a response. Please try again.', 'success': False}), 500
    logger.exception(f"{action}: {e}")
    return jsonify({'error': 'An error occurred. Please try again.', 'success': False}), 500


@app.route('/')
def index():
    """Render the main page."""
    return render_template_string(HTML_TEMPLATE)


@app.route('/chat', methods=['POST'])
def chat():
    """Handle one chat turn."""
    try:
        uid = _current_user()
        data = request.get_json(silent=True) or {}
        prompt = (data.get('prompt') or '').strip()
        if not prompt:
            return jsonify({'error': 'Prompt required', 'success': False}), 400

        history = [Message.model_validate(m) for m in data.get('history', [])]
        profile = _service('profile_service').get_profile(uid, email=request.headers.get('X-User-Email'))

        response = _service('chat_service').chat(history, prompt, profile)
        return jsonify({'success': True, **response.model_dump(mode='json')})

    except Exception as e:
        return _error_response(e, 'Chat error')


@app.route('/profile', methods=['GET'])
def get_profile():
    """Return the caller's profile, creating it with defaults on first access."""
    try:
        uid = _current_user()
        profile = _service('profile_service').get_profile(uid, email=request.headers.get('X-User-Email'))
        return jsonify({'success': True, 'profile': profile.model_dump(mode='json')})
    except Exception as e:
        return _error_response(e, 'Profile error')


@app.route('/profile', methods=['PUT'])
def update_profile():
    """Overwrite profile fields."""
    try:
        uid = _current_user()
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'JSON object required', 'success': False}), 400
        profile = _service('profile_service').update_profile(uid, data)
        return jsonify({'success': True, 'profile': profile.model_dump(mode='json')})
    except Exception as e:
        return _error_response(e, 'Profile update error')


@app.route('/resumes', methods=['GET'])
def list_resumes():
    """List the caller's resumes, newest first."""
    try:
        uid = _current_user()
        resumes = _service('resume_service').list_resumes(uid)
        return jsonify({'success': True, 'resumes': [_resume_summary(r) for r in resumes]})
    except Exception as e:
        return _error_response(e, 'List resumes error')


@app.route('/resumes', methods=['POST'])
def create_resume():
    """Generate, compile and save a resume for a job description."""
    try:
        uid = _current_user()
        data = request.get_json(silent=True) or {}
        title = (data.get('title') or '').strip()
        job_description = (data.get('job_description') or '').strip()
        if not title or not job_description:
            return jsonify({'error': 'Title and job description required', 'success': False}), 400

        resume = _service('resume_service').create_resume(
            uid, title, job_description, compile_pdf=bool(data.get('compile_pdf', True))
        )
        return jsonify({'success': True, 'resume': resume.to_dict()}), 201
    except Exception as e:
        return _error_response(e, 'Create resume error')


@app.route('/resumes/<resume_id>', methods=['GET'])
def get_resume(resume_id):
    try:
        resume = _owned_resume(resume_id, _current_user())
        return jsonify({'success': True, 'resume': resume.to_dict()})
    except Exception as e:
        return _error_response(e, 'Get resume error')


@app.route('/resumes/<resume_id>', methods=['PUT'])
def update_resume(resume_id):
    """Save a manual edit of the title or LaTeX source."""
    try:
        _owned_resume(resume_id, _current_user())
        data = request.get_json(silent=True) or {}
        resume = _service('resume_service').update_resume(
            resume_id,
            title=data.get('title'),
            latex_content=data.get('latex_content'),
            recompile=bool(data.get('recompile', False)),
        )
        return jsonify({'success': True, 'resume': resume.to_dict()})
    except Exception as e:
        return _error_response(e, 'Update resume error')


@app.route('/resumes/<resume_id>', methods=['DELETE'])
def delete_resume(resume_id):
    try:
        _owned_resume(resume_id, _current_user())
        _service('resume_service').delete_resume(resume_id)
        return jsonify({'success': True})
    except Exception as e:
        return _error_response(e, 'Delete resume error')


@app.route('/resumes/<resume_id>/compile', methods=['POST'])
def compile_resume(resume_id):
    """Recompile the stored LaTeX to PDF."""
    try:
        _owned_resume(resume_id, _current_user())
        resume = _service('resume_service').compile_resume(resume_id)
        return jsonify({'success': True, 'resume': _resume_summary(resume)})
    except Exception as e:
        return _error_response(e, 'Compile error')


@app.route('/resumes/<resume_id>/preview', methods=['GET'])
def preview_resume(resume_id):
    try:
        resume = _owned_resume(resume_id, _current_user())
        return jsonify({'success': True, 'html': render_latex_preview(resume.latex_content)})
    except Exception as e:
        return _error_response(e, 'Preview error')


@app.route('/preview', methods=['POST'])
def preview_latex():
    """Render unsaved LaTeX (e.g. from the editor) as HTML."""
    data = request.get_json(silent=True) or {}
    return jsonify({'success': True, 'html': render_latex_preview(data.get('latex') or '')})


@app.route('/resumes/<resume_id>/download.tex', methods=['GET'])
def download_tex(resume_id):
    try:
        resume = _owned_resume(resume_id, _current_user())
        filename = ResumeService.tex_filename(resume)
        return Response(
            resume.latex_content,
            mimetype='application/x-tex',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'},
        )
    except Exception as e:
        return _error_response(e, 'Download error')


@app.route('/resumes/<resume_id>/download.pdf', methods=['GET'])
def download_pdf(resume_id):
    try:
        resume = _owned_resume(resume_id, _current_user())
        pdf = _service('resume_service').pdf_bytes(resume)
        return send_file(
            io.BytesIO(pdf),
            mimetype='application/pdf',
            as_attachment=True,
            download_name=ResumeService.pdf_filename(resume),
        )
    except Exception as e:
        return _error_response(e, 'Download error')


def main():
    """
    Main application entry point with web UI.
    """
    parser = argparse.ArgumentParser(description="Conversational resume builder")
    parser.add_argument("--config", default="config.json", help="Path to JSON config file")
    parser.add_argument("--host", default=None, help="Host to bind (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (overrides config)")
    args = parser.parse_args()

    settings = get_settings(args.config)
    setup_logging(level=settings.log_level, log_file=settings.log_file or str(get_log_file_path()))
    init_app(settings)

    host = args.host or settings.host
    port = args.port or settings.port

    print("\n" + "="*70)
    print("📝 RESUME CHAT - WEB UI")
    print("="*70)
    print(f"🌐 Opening web UI at http://localhost:{port}")
    print(f"   Press Ctrl+C to stop\n")
    app.run(debug=settings.debug, host=host, port=port, use_reloader=False)


if __name__ == "__main__":
    main()
