"""
Bootstrap page generator.

Produces the self-contained HTML page that shows a click-to-play canvas,
downloads <base>.js with a progress bar, injects it and launches love.js.
The inline loader uses the transition table from states.py and the
constants from machine.py.
"""
import html
import json
from typing import Any

from lovebuild.bootstrap.machine import (
    LOADER_TEXT,
    PROGRESS_BAR_HEIGHT,
    PROGRESS_BAR_WIDTH,
    PROGRESS_DEBOUNCE,
    TICK_MS,
)
from lovebuild.bootstrap.states import transition_table
from lovebuild.config import PresentationConfig
from lovebuild.packaging.encoder import VIRTUAL_ROOT


def _js_value(value: Any) -> str:
    """JSON literal safe to place inside a <script> element."""
    return json.dumps(value, ensure_ascii=False).replace('</', '<\\/')


def _render_controls(presentation: PresentationConfig) -> str:
    if not presentation.controls:
        return ''
    hints = []
    for hint in presentation.controls:
        keys = ''.join(f'<kbd>{html.escape(key)}</kbd>' for key in hint.keys)
        hints.append(f'{keys} {html.escape(hint.action)}')
    return '\t<div id="controls">\n\t\t' + ' &nbsp; '.join(hints) + '\n\t</div>\n'


def _render_footer(presentation: PresentationConfig) -> str:
    if not presentation.footer:
        return ''
    return '<div id="footer">Made with <a href="https://love2d.org/" target="_blank">LÖVE</a></div>\n'


def render_styles(presentation: PresentationConfig) -> str:
    width = presentation.width
    return f'''html, body
{{
	background-color: #111128;
	margin: 0;
	height: 100%;
	font-family: "Courier New", monospace;
	font-size: 18px;
	color: #e0e0f0;
}}
#wrapper
{{
	margin: 0 0 -21px;
	padding: 1px;
	min-height: 100%;
	border-bottom: 21px solid transparent;
	box-sizing: border-box;
}}
#title
{{
	background-color: #2ecc40;
	margin: 9px auto;
	max-width: {width}px;
	padding: .5em;
	border: 1px solid #1a8a2a;
	border-radius: 10px;
	box-shadow: 3px 3px 0 0 rgba(0,0,0,0.3);
	text-align: center;
	color: #111128;
	font-weight: bold;
}}
#main
{{
	background-color: #1a1a3e;
	margin: 9px auto;
	max-width: {width + 30}px;
	padding: 15px 0;
	border: 1px solid #333;
	border-radius: 10px;
	box-shadow: 3px 3px 0 0 rgba(0,0,0,0.3);
}}
#controls
{{
	margin: 8px auto;
	max-width: {width}px;
	text-align: center;
	font-size: 13px;
	color: #888;
}}
#controls kbd
{{
	background: #222;
	border: 1px solid #555;
	border-radius: 3px;
	padding: 1px 6px;
	font-family: inherit;
	color: #ccc;
}}
#footer
{{
	padding-top: 3px;
	height: 17px;
	border-top: 1px dashed #444;
	color: #666;
	font-size: 9pt;
	text-align: center;
}}
#footer a {{ color: #2ecc40; }}
@media (max-width: 850px)
{{
	#wrapper {{ font-size: 80%; }}
	#title {{ padding: .2em; }}
}}
'''


def render_loader_script(presentation: PresentationConfig) -> str:
    """JavaScript for the loader state machine (without <script> tags)."""
    bar_w = PROGRESS_BAR_WIDTH
    bar_h = PROGRESS_BAR_HEIGHT
    return f'''(function(){{
var TXT = {_js_value(LOADER_TEXT)};
var TRANSITIONS = {_js_value(transition_table())};
var SCRIPT = {_js_value(presentation.script_name)}, ROOT = {_js_value(VIRTUAL_ROOT)};
var state = 'idle', enabled = true, pCnt = 0;
var canvas = document.getElementById('canvas'), ctx;
var Esc = function(s)
{{
	return String(s).replace(/[&<>"]/g, function(c) {{ return {{'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;'}}[c]; }});
}};
var Msg = function(m)
{{
	ctx.clearRect(0, 0, canvas.width, canvas.height);
	ctx.fillStyle = '#888';
	for (var i = 0, a = m.split('\\n'), n = a.length; i != n; i++)
		ctx.fillText(a[i], canvas.width/2, canvas.height/2-(n-1)*20+10+i*40);
}};
var Overlay = function(m)
{{
	canvas.outerHTML = '<div style="max-width:90%;width:'+canvas.clientWidth+'px;height:'+canvas.clientHeight+'px;background:#000;display:table-cell;vertical-align:middle"><div style="background-color:#FFF;color:#000;padding:1.5em;max-width:640px;width:80%;margin:auto;text-align:center">'+TXT.NOWEBGL+(m?'<br><br>'+m:'')+'</div></div>';
}};
var Dispatch = function(ev, d)
{{
	var next = (TRANSITIONS[state] || {{}})[ev];
	if (!next) return;
	state = next;
	Enter[next](d || {{}});
}};
var Enter =
{{
	downloading: function()
	{{
		enabled = false;
		pCnt = 0;
		Msg(TXT.LOAD);
		var xhr = new XMLHttpRequest();
		xhr.open('GET', SCRIPT);
		xhr.onprogress = function(e)
		{{
			if (state != 'downloading' || !e.lengthComputable || pCnt++ < {PROGRESS_DEBOUNCE} || !(e.total > 0)) return;
			var x = canvas.width/2-{bar_w // 2}, y = canvas.height*.6, w = Math.min(e.loaded/e.total,1)*{bar_w}, g = ctx.createLinearGradient(x,0,x+w,0);
			g.addColorStop(0,'#2ecc40');g.addColorStop(1,'#45d659');
			ctx.fillStyle = '#111'; ctx.fillRect(x-2,y-2,{bar_w + 4},{bar_h + 4});
			ctx.fillStyle = '#222'; ctx.fillRect(x  ,y  ,{bar_w},{bar_h});
			ctx.fillStyle = g;      ctx.fillRect(x  ,y  ,w,  {bar_h});
		}};
		xhr.onerror = xhr.onabort = function() {{ Dispatch('download_failed', {{kind: 'download', message: TXT.DLERROR}}); }};
		xhr.onload = function()
		{{
			if (xhr.status != 200) {{ Dispatch('download_failed', {{kind: 'download', message: TXT.DLERROR + '\\nStatus: ' + xhr.status + ' ' + xhr.statusText}}); return; }}
			Dispatch('downloaded', {{xhr: xhr}});
		}};
		xhr.send();
	}},
	preparing: function(d)
	{{
		var xhr = d.xhr;
		Msg(TXT.PARSE);
		setTimeout(function()
		{{
			window.onerror = function(e,u,l) {{ Dispatch('runtime_error', {{kind: 'runtime', message: Esc(e)+'<br>('+Esc(u)+':'+l+')'}}); }};
			window.Module = {{ TOTAL_MEMORY: {presentation.memory_bytes}, TOTAL_STACK: {presentation.stack_bytes}, currentScriptUrl: '-', preInit: function() {{ Dispatch('initialized'); }} }};
			var s = document.createElement('script'), doc = document.documentElement;
			s.textContent = xhr.response;
			doc.appendChild(s);
			doc.removeChild(s);
			xhr = d.xhr = s = s.textContent = null;
		}}, {TICK_MS});
	}},
	executing: function()
	{{
		Msg(TXT.EXECUTE);
		Module.canvas = canvas.cloneNode(false);
		Module.canvas.oncontextmenu = function(e) {{ e.preventDefault() }};
		Module.setWindowTitle = function(title) {{ }};
		Module.postRun = function()
		{{
			if (Module.noExitRuntime) Dispatch('started');
			else Dispatch('exited', {{kind: 'capability', message: ''}});
		}};
		setTimeout(function() {{ Module.run([ROOT]); }}, {TICK_MS});
	}},
	running: function()
	{{
		canvas.parentNode.replaceChild(Module.canvas, canvas);
		TXT = Msg = ctx = canvas = null;
		Module.canvas.focus();
	}},
	failed: function(d)
	{{
		if (d.kind == 'download') {{ Msg(d.message); enabled = true; return; }}
		Overlay(d.message);
	}}
}};
canvas.onclick = function()
{{
	if (!enabled) return;
	canvas.scrollIntoView();
	Dispatch('click');
}};
canvas.oncontextmenu = function(e) {{ e.preventDefault() }};
ctx = canvas.getContext('2d');
ctx.font = '30px "Courier New", monospace';
ctx.textAlign = 'center';
ctx.fillStyle = '#888';
ctx.fillRect(canvas.width/2-254, canvas.height/2-104, 508, 208);
ctx.fillStyle = '#1a1a3e';
ctx.fillRect(canvas.width/2-250, canvas.height/2-100, 500, 200);
ctx.fillStyle = '#2ecc40';
ctx.fillText(TXT.PLAYBTN, canvas.width/2, canvas.height/2+10);
}})()'''


def render_bootstrap_page(presentation: PresentationConfig) -> str:
    """Return the complete bootstrap HTML document."""
    title = html.escape(presentation.title)
    return (
        '<!DOCTYPE html>\n'
        '<html lang="en-us">\n'
        '<head>\n'
        '\t<meta charset="utf-8">\n'
        '\t<meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f'\t<title>{title}</title>\n'
        '\t<style type="text/css">\n'
        f'{render_styles(presentation)}'
        '\t</style>\n'
        '</head>\n'
        '<body>\n'
        '<div id="wrapper">\n'
        f'\t<h1 id="title">{title}</h1>\n'
        '\t<div id="main">\n'
        f'\t\t<center><canvas id="canvas" width="{presentation.width}" height="{presentation.height}" '
        'style="max-width:100%;background:#000;vertical-align:middle"></canvas></center>\n'
        '\t</div>\n'
        f'{_render_controls(presentation)}'
        '</div>\n'
        f'{_render_footer(presentation)}'
        '<script type="text/javascript">'
        f'{render_loader_script(presentation)}'
        '</script>\n'
        '</body>\n'
        '</html>\n'
    )
