"""
FlatDB REST API Server
Provides HTTP interface to the query engine
"""

import os
import logging
import threading
import traceback

from flask import Flask, jsonify, request
from flask_cors import CORS

from flatdb import DatabaseManager, __version__
from flatdb.config import Settings, get_settings
from flatdb.errors import FlatDBError, ParseError

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None) -> Flask:
    """Build the Flask application around one data directory"""
    settings = settings or get_settings()
    settings.ensure_directories()

    app = Flask(__name__)
    app.config['DEBUG'] = settings.server.debug
    CORS(app)

    manager = DatabaseManager.from_settings(settings)
    # one executor per database so its transaction survives between requests
    executors = {}
    lock = threading.Lock()

    def get_executor(db_name):
        if db_name not in executors:
            executors[db_name] = manager.open(db_name)
        return executors[db_name]

    def database_missing(db_name):
        try:
            exists = manager.database_exists(db_name)
        except ParseError as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        if not exists:
            return jsonify({
                'success': False,
                'error': f'Database {db_name} not found'
            }), 404
        return None

    # ==================== DATABASE ENDPOINTS ====================

    @app.route('/api/databases', methods=['GET'])
    def list_databases():
        """Get list of all databases"""
        databases = manager.list_databases()
        return jsonify({
            'success': True,
            'databases': databases,
            'count': len(databases)
        })

    @app.route('/api/databases', methods=['POST'])
    def create_database():
        """Create a new database"""
        data = request.get_json(silent=True)
        db_name = data.get('name') if data else None

        if not db_name:
            return jsonify({
                'success': False,
                'error': 'Database name required'
            }), 400

        try:
            created = manager.create_database(db_name)
        except FlatDBError as e:
            return jsonify({'success': False, 'error': str(e)}), 400

        if created:
            return jsonify({
                'success': True,
                'message': f'Database {db_name} created'
            }), 201
        return jsonify({
            'success': False,
            'error': f'Database {db_name} already exists'
        }), 409

    # ==================== TABLE ENDPOINTS ====================

    @app.route('/api/databases/<db_name>/tables', methods=['GET'])
    def list_tables(db_name):
        """List tables in a database"""
        missing = database_missing(db_name)
        if missing:
            return missing

        with lock:
            tables = get_executor(db_name).table_names()
        return jsonify({
            'success': True,
            'tables': tables,
            'count': len(tables)
        })

    @app.route('/api/databases/<db_name>/tables/<table_name>/schema', methods=['GET'])
    def get_table_schema(db_name, table_name):
        """Get table schema"""
        missing = database_missing(db_name)
        if missing:
            return missing

        try:
            with lock:
                schema = get_executor(db_name).describe(table_name)
        except FlatDBError as e:
            return jsonify({'success': False, 'error': str(e)}), 404

        return jsonify({
            'success': True,
            'schema': schema.to_dict()
        })

    @app.route('/api/databases/<db_name>/tables/<table_name>/data', methods=['GET'])
    def get_table_data(db_name, table_name):
        """Get all data from a table"""
        missing = database_missing(db_name)
        if missing:
            return missing

        try:
            with lock:
                table = get_executor(db_name).table(table_name)
                rows = table.select_dicts(['*'])
        except FlatDBError as e:
            return jsonify({'success': False, 'error': str(e)}), 404

        return jsonify({
            'success': True,
            'schema': table.schema.to_dict(),
            'rows': rows,
            'count': len(rows)
        })

    @app.route('/api/databases/<db_name>/tables/<table_name>/stats', methods=['GET'])
    def get_table_stats(db_name, table_name):
        """Get row count and columns of a table"""
        missing = database_missing(db_name)
        if missing:
            return missing

        try:
            with lock:
                stats = get_executor(db_name).table(table_name).get_stats()
        except FlatDBError as e:
            return jsonify({'success': False, 'error': str(e)}), 404

        return jsonify({
            'success': True,
            'stats': stats
        })

    # ==================== QUERY EXECUTION ENDPOINTS ====================

    @app.route('/api/databases/<db_name>/execute', methods=['POST'])
    def execute_query(db_name):
        """Execute a command on a database"""
        data = request.get_json(silent=True)
        if not data:
            return jsonify({
                'success': False,
                'error': 'Request body required'
            }), 400

        query = data.get('query', '')
        if not query:
            return jsonify({
                'success': False,
                'error': 'Query required'
            }), 400

        missing = database_missing(db_name)
        if missing:
            return missing

        with lock:
            result = get_executor(db_name).execute(query)
        return jsonify(result.to_dict())

    @app.route('/api/databases/<db_name>/execute/batch', methods=['POST'])
    def execute_batch_queries(db_name):
        """Execute multiple commands in order"""
        data = request.get_json(silent=True)
        if not data:
            return jsonify({
                'success': False,
                'error': 'Request body required'
            }), 400

        queries = data.get('queries', [])
        if not queries or not isinstance(queries, list):
            return jsonify({
                'success': False,
                'error': 'List of queries required'
            }), 400

        missing = database_missing(db_name)
        if missing:
            return missing

        with lock:
            executor = get_executor(db_name)
            results = [executor.execute(str(query)).to_dict() for query in queries]

        return jsonify({
            'success': all(r['success'] for r in results),
            'results': results,
            'count': len(results)
        })

    @app.route('/api/databases/<db_name>/transaction', methods=['GET'])
    def transaction_status(db_name):
        """Whether a transaction is open and how many commands it holds"""
        missing = database_missing(db_name)
        if missing:
            return missing

        with lock:
            status = get_executor(db_name).transaction_status()
        return jsonify({
            'success': True,
            'transaction': status
        })

    # ==================== HEALTH & INFO ENDPOINTS ====================

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        data_dir = manager.base_dir
        return jsonify({
            'status': 'healthy',
            'version': __version__,
            'database_count': len(manager.list_databases()),
            'storage_path': data_dir,
            'storage_writable': os.access(data_dir, os.W_OK)
        })

    @app.route('/api/info', methods=['GET'])
    def api_info():
        """API information"""
        return jsonify({
            'name': 'FlatDB REST API',
            'version': __version__,
            'description': 'RESTful API for the FlatDB query engine',
            'endpoints': {
                'databases': {
                    'GET /api/databases': 'List all databases',
                    'POST /api/databases': 'Create new database',
                    'GET /api/databases/<name>/tables': 'List tables in database'
                },
                'tables': {
                    'GET /api/databases/<db>/tables/<table>/schema': 'Get table schema',
                    'GET /api/databases/<db>/tables/<table>/data': 'Get table data',
                    'GET /api/databases/<db>/tables/<table>/stats': 'Get table statistics'
                },
                'queries': {
                    'POST /api/databases/<db>/execute': 'Execute a command',
                    'POST /api/databases/<db>/execute/batch': 'Execute commands in order',
                    'GET /api/databases/<db>/transaction': 'Transaction status'
                },
                'system': {
                    'GET /api/health': 'Health check',
                    'GET /api/info': 'API information'
                }
            }
        })

    # ==================== ERROR HANDLERS ====================

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Endpoint not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method not allowed'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error("Unhandled error: %s", error)
        return jsonify({
            'success': False,
            'error': 'Internal server error',
            'traceback': traceback.format_exc() if app.debug else None
        }), 500

    return app
