import pandas as pd
from flask import Flask, render_template, request, send_file, jsonify, redirect, url_for
from werkzeug.exceptions import RequestEntityTooLarge
import io
import logging
import concurrent.futures

from errors import LoadError
from workbook import load_workbook
from workspace import Workspace, FIRST, SECOND


EXPORT_OPTIONS = {'options': {'strings_to_formulas': False, 'strings_to_urls': False}}


def read_upload(file):
    filename = file.filename or ""
    return file.read(), filename


def load_in_background(data, filename, timeout):
    # Parsing runs off the request thread; the caller waits for the single result
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(load_workbook, data, filename)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            raise LoadError(f"Reading {filename or 'the file'} took longer than {timeout} seconds.",
                            code="LOAD_TIMEOUT")
    finally:
        executor.shutdown(wait=False)


def result_frames(result):
    first_label = f"Only in {result.first.label()}"
    second_label = f"Only in {result.second.label()}"
    summary = pd.DataFrame({
        'Selection': [result.first.label(), result.second.label()],
        'Values': [result.first_count, result.second_count],
        'Unique': [len(result.only_in_first), len(result.only_in_second)],
    })
    return {
        'Only_In_First': pd.DataFrame({first_label: result.only_in_first}),
        'Only_In_Second': pd.DataFrame({second_label: result.only_in_second}),
        'Summary': summary,
    }


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_mapping(
        MAX_CONTENT_LENGTH=50 * 1024 * 1024,  # 50MB safety
        SECRET_KEY='dev',
        LOG_LEVEL='INFO',
        LOAD_TIMEOUT=60,
    )
    if test_config is None:
        app.config.from_prefixed_env('COLUMN_COMPARE')
    else:
        app.config.update(test_config)

    workspace = Workspace()
    app.extensions['workspace'] = workspace

    @app.route('/', methods=['GET'])
    def index():
        return render_template('index.html', ws=workspace)

    @app.route('/upload', methods=['POST'])
    def upload():
        file = request.files.get('file')
        if not file or not file.filename:
            workspace.status = "Error loading file: no file selected."
            return redirect(url_for('index'))

        token = workspace.begin_load()
        data, filename = read_upload(file)
        try:
            workbook = load_in_background(data, filename, app.config['LOAD_TIMEOUT'])
        except LoadError as e:
            app.logger.warning(f"Upload of {filename} rejected ({e.code}): {e}")
            workspace.fail_load(token, e)
            return redirect(url_for('index'))

        workspace.finish_load(token, workbook)
        return redirect(url_for('index'))

    @app.route('/select', methods=['POST'])
    def select():
        for side in (FIRST, SECOND):
            sheet = request.form.get(f'{side}_sheet')
            column = request.form.get(f'{side}_column')
            if sheet is None and column is None:
                continue
            workspace.select(side, sheet=sheet, column=column, reset_column_on_sheet_change=True)
        return redirect(url_for('index'))

    @app.route('/compare', methods=['POST'])
    def compare():
        for side in (FIRST, SECOND):
            sheet = request.form.get(f'{side}_sheet')
            column = request.form.get(f'{side}_column')
            if sheet is not None or column is not None:
                workspace.select(side, sheet=sheet, column=column or "")
        workspace.compare()
        return redirect(url_for('index'))

    @app.route('/columns/<path:sheet>')
    def columns(sheet):
        if workspace.workbook is None:
            return jsonify({'error': 'No workbook loaded.'}), 404
        if sheet not in workspace.workbook:
            return jsonify({'error': f"Sheet '{sheet}' not found."}), 404
        return jsonify({'sheet': sheet, 'columns': workspace.column_options(sheet)})

    @app.route('/download')
    def download():
        result = workspace.result
        if result is None:
            return "Nothing to download: run a comparison first.", 404

        output = io.BytesIO()
        # Cell values are exported as text, never as formulas or links
        with pd.ExcelWriter(output, engine='xlsxwriter', engine_kwargs=EXPORT_OPTIONS) as writer:
            for sheet_name, df in result_frames(result).items():
                df.to_excel(writer, sheet_name=sheet_name, index=False)

        output.seek(0)
        return send_file(output, as_attachment=True, download_name='column_comparison.xlsx')

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        workspace.status = f"Error loading file: the file is larger than {limit_mb}MB."
        return redirect(url_for('index'))

    return app


app = create_app()

if __name__ == '__main__':
    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app.run(debug=True)
